import os

from fastapi.templating import Jinja2Templates

from . import config
from .submissions import format_date, format_file_size

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["filesize"] = format_file_size
templates.env.filters["datetime_display"] = format_date


def render_email(name: str, **context) -> str:
    context.setdefault("site_url", config.SITE_URL)
    return templates.env.get_template(f"email/{name}").render(**context)
