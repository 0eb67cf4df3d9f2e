"""
Snippety — Snippet Page Handlers
==================================

What:  Server-rendered pages: home (latest snippets), view, and create.
How:   Each handler calls the store, then renders a page from the template
       cache. Pages are rendered to a string before the response is built,
       so a template error becomes a clean 500 rather than half a page.

Routes:
    GET  /                       latest snippets
    GET  /snippet/view/{id}      one snippet (404 when missing or expired)
    GET  /snippet/create         empty form
    POST /snippet/create         validate → insert → 303 to the view page
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from snippety.dependencies import get_snippet_store, get_templates
from snippety.exceptions import NotFoundError, ValidationError
from snippety.schemas.snippet import DEFAULT_EXPIRY_DAYS, SnippetCreateForm
from snippety.services.snippet_store import SnippetStore
from snippety.templates import TemplateCache, new_template_data

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Snippets"])


def render(
    templates: TemplateCache,
    page: str,
    status_code: int = 200,
    **data: Any,
) -> HTMLResponse:
    """
    Render `page` with the shared template data.

    Raises:
        UnknownTemplateError: the page is not in the cache
    """
    template_set = templates.get(page)
    body = template_set.render(**new_template_data(**data))
    return HTMLResponse(content=body, status_code=status_code)


@router.get("/", response_class=HTMLResponse, summary="Latest snippets")
async def home(
    store: SnippetStore = Depends(get_snippet_store),
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    snippets = await store.latest()
    return render(templates, "home.tmpl.html", snippets=snippets)


@router.get("/snippet/view/{snippet_id}", response_class=HTMLResponse, summary="View a snippet")
async def snippet_view(
    snippet_id: str,
    store: SnippetStore = Depends(get_snippet_store),
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    """
    Show a single live snippet.

    Non-numeric and non-positive ids are treated like unknown ones (404)
    rather than FastAPI's default 422.
    """
    try:
        parsed_id = int(snippet_id)
    except ValueError:
        raise NotFoundError(resource="snippet", resource_id=snippet_id) from None
    if parsed_id < 1:
        raise NotFoundError(resource="snippet", resource_id=snippet_id)

    snippet = await store.get(parsed_id)
    return render(templates, "view.tmpl.html", snippet=snippet)


@router.get("/snippet/create", response_class=HTMLResponse, summary="New snippet form")
async def snippet_create(
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    form = {"title": "", "content": "", "expires": DEFAULT_EXPIRY_DAYS}
    return render(templates, "create.tmpl.html", form=form, errors={})


@router.post("/snippet/create", response_class=HTMLResponse, summary="Publish a snippet")
async def snippet_create_post(
    title: str = Form(default=""),
    content: str = Form(default=""),
    expires: str = Form(default=""),
    store: SnippetStore = Depends(get_snippet_store),
    templates: TemplateCache = Depends(get_templates),
):
    """
    Validate the form and insert the snippet.

    Invalid input re-renders the form with the submitted values and one
    message per failing field (422). Success redirects with 303 so a
    browser refresh does not resubmit.
    """
    try:
        form = SnippetCreateForm.from_form(title=title, content=content, expires=expires)
    except ValidationError as e:
        logger.info("Rejected snippet form: %s", ", ".join(sorted(e.errors)))
        submitted: Dict[str, Any] = {"title": title, "content": content, "expires": expires}
        try:
            # Keeps the matching radio button checked on re-render
            submitted["expires"] = int(expires)
        except ValueError:
            pass
        return render(
            templates,
            "create.tmpl.html",
            status_code=422,
            form=submitted,
            errors=e.errors,
        )

    snippet_id = await store.create(form.title, form.content, form.expires)
    return RedirectResponse(url=f"/snippet/view/{snippet_id}", status_code=303)
