"""アプリケーション全体で使用される列挙型を定義するモジュール。"""

from enum import StrEnum


class RequestMethod(StrEnum):
    """ビューが受け付けるHTTPリクエストメソッド。

    Attributes:
        GET (str): HTTP GETメソッド。ローダー（画面表示）に使う。
        HEAD (str): HTTP HEADメソッド。
        POST (str): HTTP POSTメソッド。フォームからの操作に使う。
    """

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
