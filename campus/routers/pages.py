from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="", tags=["pages"])


def _templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _load(request: Request):
    return request.app.state.store.load()


def render(request: Request, name: str, context: dict, status_code: int = 200) -> HTMLResponse:
    return _templates(request).TemplateResponse(request, name, context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    data = _load(request)
    return render(request, "index.html", {"data": data, "title": "Home"})


@router.get("/students", response_class=HTMLResponse)
def students(request: Request):
    data = _load(request)
    return render(request, "students.html", {"students": data.students, "title": "Students"})


@router.get("/teachers", response_class=HTMLResponse)
def teachers(request: Request):
    data = _load(request)
    return render(request, "teachers.html", {"teachers": data.teachers, "title": "Teachers"})


@router.get("/gallery", response_class=HTMLResponse)
def gallery(request: Request):
    data = _load(request)
    return render(request, "gallery.html", {"gallery": data.gallery, "title": "Gallery"})


@router.get("/about", response_class=HTMLResponse)
def about(request: Request):
    return render(request, "about.html", {"title": "About Us"})


@router.get("/developer", response_class=HTMLResponse)
def developer(request: Request):
    return render(request, "developer.html", {"title": "Developer"})

