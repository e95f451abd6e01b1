"""django_tasksプロジェクトのWSGI設定。"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "django_tasks.settings")

application = get_wsgi_application()
