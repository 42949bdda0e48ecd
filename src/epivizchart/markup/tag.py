"""Markup tags for epiviz custom elements, rendered to HTML with Jinja2."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from jinja2 import Environment
from markupsafe import Markup

from epivizchart.core.errors import ValidationError
from epivizchart.core.models import ChartData, GenomicWindow

_TAG_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")
_ATTR_NAME_PATTERN = re.compile(r"^[A-Za-z_:][A-Za-z0-9_.:-]*$")

_jinja_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)  # noqa: S701 — autoescape is enabled
_TAG_TEMPLATE = _jinja_env.from_string(
    "<{{ name }}{% for key, value in attrs %} {{ key }}=\"{{ value }}\"{% endfor %}>"
    "{% for child in children %}{{ child }}{% endfor %}"
    "</{{ name }}>"
)


def format_attribute(value: Any) -> str:  # noqa: ANN401
    """Turn an attribute value into its string form.

    Strings pass through, chart data keeps its pre-encoded payloads, and
    other containers are encoded as JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, ChartData):
        return value.to_json()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, default=str)


class Tag:
    """A markup node with attributes and ordered children.

    Attributes set to ``None`` are kept on the node but left out when
    rendering.
    """

    def __init__(self, name: str, attrs: Mapping[str, Any] | None = None, children: list[Tag] | None = None) -> None:
        """Initialize tag.

        Args:
            name: Element name
            attrs: Attribute values
            children: Initial child tags

        Raises:
            ValidationError: If the element or an attribute name is not a valid HTML name
        """
        if not _TAG_NAME_PATTERN.match(name):
            msg = f"Invalid tag name: {name!r}"
            raise ValidationError(msg)
        for key in attrs or {}:
            if not _ATTR_NAME_PATTERN.match(key):
                msg = f"Invalid attribute name on <{name}>: {key!r}"
                raise ValidationError(msg)

        self._name = name
        self._attrs: dict[str, Any] = dict(attrs or {})
        self._children: list[Tag] = list(children or [])

    @property
    def name(self) -> str:
        """Element name."""
        return self._name

    @property
    def attrs(self) -> Mapping[str, Any]:
        """Read-only view of the attributes."""
        return MappingProxyType(self._attrs)

    @property
    def children(self) -> tuple[Tag, ...]:
        """Child tags in insertion order."""
        return tuple(self._children)

    def get_attr(self, key: str, default: Any = None) -> Any:  # noqa: ANN401
        """Return an attribute value."""
        return self._attrs.get(key, default)

    def append_child(self, child: Tag) -> Tag:
        """Append a child tag and return this tag.

        Args:
            child: Tag to append

        Returns:
            This tag, now holding the child last
        """
        if not isinstance(child, Tag):
            msg = f"Only tags can be appended, got {type(child).__name__}"
            raise ValidationError(msg)
        self._children.append(child)
        return self

    def render(self) -> Markup:
        """Render this tag and its children to HTML."""
        attrs = [(key, format_attribute(value)) for key, value in self._attrs.items() if value is not None]
        children = [child.render() for child in self._children]
        return Markup(_TAG_TEMPLATE.render(name=self._name, attrs=attrs, children=children))  # noqa: S704 — rendered with autoescape

    def __html__(self) -> Markup:
        """Support the markupsafe protocol."""
        return self.render()

    def __str__(self) -> str:
        """Return the rendered HTML."""
        return str(self.render())

    def __repr__(self) -> str:
        """Return a short description of the tag."""
        return f"<Tag {self._name} attrs={sorted(self._attrs)} children={len(self._children)}>"


class ChartTag(Tag):
    """Chart element carrying JSON payloads for one datasource.

    Chart tags are leaves: appending children is rejected.
    """

    def __init__(  # noqa: PLR0913 — one argument per chart attribute
        self,
        tag_name: str,
        id: str,  # noqa: A002 — mirrors the HTML attribute
        measurements: str,
        data: ChartData,
        settings: Mapping[str, Any] | None = None,
        colors: Sequence[str] | Mapping[str, Any] | None = None,
        css_class: str = "charts",
    ) -> None:
        """Initialize chart tag.

        Args:
            tag_name: Custom element name, e.g. epiviz-json-line-plot
            id: Datasource id the chart is backed by
            measurements: JSON-encoded measurement descriptors
            data: Row and column payloads
            settings: Chart settings passed through unchanged
            colors: Chart colors passed through unchanged
            css_class: Value of the class attribute
        """
        super().__init__(
            tag_name,
            {
                "class": css_class,
                "id": id,
                "measurements": measurements,
                "data": data,
                "settings": settings,
                "colors": colors,
            },
        )

    @property
    def tag_name(self) -> str:
        """Custom element name."""
        return self.name

    @property
    def id(self) -> str:
        """Datasource id of the chart."""
        return self._attrs["id"]

    @property
    def measurements(self) -> str:
        """JSON-encoded measurement descriptors."""
        return self._attrs["measurements"]

    @property
    def data(self) -> ChartData:
        """Row and column payloads."""
        return self._attrs["data"]

    @property
    def settings(self) -> Mapping[str, Any] | None:
        """Chart settings."""
        return self._attrs["settings"]

    @property
    def colors(self) -> Sequence[str] | Mapping[str, Any] | None:
        """Chart colors."""
        return self._attrs["colors"]

    def append_child(self, child: Tag) -> Tag:
        """Reject children; chart elements are leaves."""
        msg = f"Chart tag <{self.name}> cannot hold children"
        raise ValidationError(msg)


class EnvironmentTag(Tag):
    """Container element accumulating the charts of one genomic window."""

    def __init__(self, window: GenomicWindow, name: str = "epiviz-environment") -> None:
        """Initialize environment tag.

        Args:
            window: Region displayed by the environment
            name: Element name
        """
        super().__init__(name, {"chr": window.chr, "start": window.start, "end": window.end})
        self._window = window

    @property
    def window(self) -> GenomicWindow:
        """Region displayed by the environment."""
        return self._window

    @property
    def charts(self) -> tuple[ChartTag, ...]:
        """Chart children in plot order."""
        return tuple(child for child in self._children if isinstance(child, ChartTag))

    def __len__(self) -> int:
        """Return the number of children."""
        return len(self._children)
