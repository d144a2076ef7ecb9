from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.settings import settings

router = APIRouter(tags=["dashboard"])

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(["html"]))


def render_template(template_name: str, **data) -> str:
    return _env.get_template(template_name).render(**data)


# ✅ single-page shell; every panel talks to the JSON API under /api
@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def dashboard():
    html = render_template(
        "index.html",
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        api_base="/api",
        passing_score=settings.PASSING_SCORE,
    )
    return HTMLResponse(html)
