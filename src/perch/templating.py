"""Kida environment setup and the Renderer contract.

Components hand the renderer a template source (or a template name) and
get back a render function that turns a plain data snapshot into markup.
``KidaRenderer`` is created once per runtime from its ``RuntimeConfig``
and caches compiled inline sources, since every instance of a component
class shares the same source.
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from kida import Environment, FileSystemLoader
from kida.template import Markup

from perch.config import RuntimeConfig

RenderFn = Callable[[Mapping[str, Any]], str]


class Renderer(Protocol):
    """Template compiler contract."""

    def compile(self, source: str) -> RenderFn: ...

    def load(self, name: str) -> RenderFn: ...


def create_environment(config: RuntimeConfig) -> Environment:
    """Create a kida Environment from runtime configuration.

    Without a ``template_dir`` only inline sources can be rendered.
    """
    loader = FileSystemLoader(str(config.template_dir)) if config.template_dir is not None else None
    return Environment(
        loader=loader,
        autoescape=config.autoescape,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )


class KidaRenderer:
    """Renderer backed by a kida Environment."""

    __slots__ = ("_compiled", "env")

    def __init__(self, env: Environment) -> None:
        self.env = env
        self._compiled: dict[str, RenderFn] = {}

    @classmethod
    def from_config(cls, config: RuntimeConfig) -> "KidaRenderer":
        return cls(create_environment(config))

    def compile(self, source: str) -> RenderFn:
        render = self._compiled.get(source)
        if render is None:
            template = self.env.from_string(source)
            render = self._compiled[source] = lambda data: template.render(dict(data))
        return render

    def load(self, name: str) -> RenderFn:
        template = self.env.get_template(name)
        return lambda data: template.render(dict(data))


def safe(markup: str) -> Markup:
    """Mark generated placeholder markup as already escaped."""
    return Markup(markup)
