"""
Snippety — Template Cache
===========================

What:  Builds, once at startup, a read-only mapping from page name to a
       render-ready Jinja2 template.
Why:   Parse errors surface before the server accepts traffic, and request
       handlers never touch the filesystem.
How:   One shared Jinja2 environment with the helper functions registered
       before anything is parsed. For every page the base layout, each
       partial and then the page are compiled, and every template they
       reference must resolve.
Who:   Built by create_app(); read by route handlers via `get_templates`.

Directory layout (relative to settings.template_dir):
    base.tmpl.html            shared layout, declares the blocks
    partials/*.tmpl.html      shared fragments included by the layout
    pages/*.tmpl.html         one per page; extends the layout

Cache keys are the page file names, e.g. "home.tmpl.html".
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, Template, TemplateError, meta

from snippety.exceptions import TemplateCacheError, UnknownTemplateError

logger = logging.getLogger(__name__)

BASE_LAYOUT = "base.tmpl.html"
PARTIALS_DIR = "partials"
PAGES_DIR = "pages"
TEMPLATE_PATTERN = "*.tmpl.html"


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp as e.g. "02 Jan 2006 at 15:04" (UTC)."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%d %b %Y at %H:%M")


# Helpers available inside template expressions, both as functions
# ({{ human_date(snippet.created) }}) and filters ({{ snippet.created|human_date }})
FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "human_date": human_date,
}


def new_template_data(**extra: Any) -> Dict[str, Any]:
    """Base context shared by every page."""
    data: Dict[str, Any] = {"current_year": datetime.now(timezone.utc).year}
    data.update(extra)
    return data


@dataclass(frozen=True)
class TemplateSet:
    """A page template composed with the shared layout and partials."""
    name: str
    template: Template

    def render(self, **context: Any) -> str:
        return self.template.render(**context)


class TemplateCache:
    """
    Immutable page-name → TemplateSet lookup.

    Never mutated after build(), so concurrent handlers read it without
    locking.
    """

    def __init__(self, sets: Mapping[str, TemplateSet]):
        self._sets = MappingProxyType(dict(sets))

    @classmethod
    def build(
        cls,
        directory: Union[str, Path],
        functions: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> "TemplateCache":
        """
        Compile every page under `directory`.

        Either every page compiles and the whole cache is returned, or the
        first failure is raised and nothing is returned.

        Raises:
            TemplateCacheError: a template is missing, unreadable or malformed
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise TemplateCacheError(
                message=f"Template directory {str(directory)!r} does not exist",
                context={"directory": str(directory)},
            )

        env = Environment(
            loader=FileSystemLoader(str(directory)),
            autoescape=True,
            auto_reload=False,
            cache_size=-1,
        )
        env.globals.update(functions if functions is not None else FUNCTIONS)
        env.filters.update(functions if functions is not None else FUNCTIONS)

        pages = sorted((directory / PAGES_DIR).glob(TEMPLATE_PATTERN))
        partials = [
            f"{PARTIALS_DIR}/{path.name}"
            for path in sorted((directory / PARTIALS_DIR).glob(TEMPLATE_PATTERN))
        ]

        sets: Dict[str, TemplateSet] = {}
        for page in pages:
            name = page.name
            page_name = f"{PAGES_DIR}/{name}"
            try:
                # Layout, then partials, then the page itself
                _compile(env, BASE_LAYOUT)
                for partial in partials:
                    _compile(env, partial)
                template = _compile(env, page_name)
            except (TemplateError, OSError, UnicodeDecodeError) as e:
                logger.error("Template %s failed to compile: %s", page_name, str(e))
                raise TemplateCacheError(
                    message=f"Could not compile template {page_name!r}: {e}",
                    context={"template": page_name, "error_type": type(e).__name__},
                ) from e
            sets[name] = TemplateSet(name=name, template=template)

        if not sets:
            logger.warning("No page templates found under %s", directory / PAGES_DIR)
        logger.info("Template cache built: %d page(s) from %s", len(sets), directory)
        return cls(sets)

    def get(self, name: str) -> TemplateSet:
        """
        Return the template set for `name`.

        Raises:
            UnknownTemplateError: no page with that name was compiled
        """
        try:
            return self._sets[name]
        except KeyError:
            raise UnknownTemplateError(name) from None

    def render(self, name: str, **context: Any) -> str:
        return self.get(name).render(**context)

    @property
    def pages(self) -> Mapping[str, TemplateSet]:
        return self._sets

    def __contains__(self, name: object) -> bool:
        return name in self._sets

    def __iter__(self) -> Iterator[str]:
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)


def _compile(env: Environment, name: str) -> Template:
    """Load `name` and make sure every template it extends or includes exists."""
    template = env.get_template(name)
    source, _, _ = env.loader.get_source(env, name)
    for referenced in meta.find_referenced_templates(env.parse(source)):
        # None means a dynamic reference that can only be resolved at render time
        if referenced is not None:
            env.get_template(referenced)
    return template


def new_template_cache(directory: Union[str, Path]) -> TemplateCache:
    """Build the cache with the default helper functions."""
    return TemplateCache.build(directory)
