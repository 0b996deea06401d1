"""Root-to-node paths used to locate nodes in diagnostics."""

from __future__ import annotations

from serde_msgspec import StructBaseStrict


class PathSegment(StructBaseStrict):
    """One step of a root-to-node path.

    ``variant`` is the wire name of the node reached by this step (for
    example ``"join"`` or ``"unresolved_function"``). ``via`` is the field
    label of the parent through which the node was reached, including the
    position for repeated fields (``"arguments[1]"``); it is ``None`` for the
    root node. ``tag`` is the wire tag of the variant when it has one.
    """

    variant: str
    via: str | None = None
    tag: int | None = None

    def render(self) -> str:
        """Return the compact ``via:variant`` form of the segment.

        Returns
        -------
        str
            Rendered segment.
        """
        if self.via is None:
            return self.variant
        return f"{self.via}:{self.variant}"


type PlanPath = tuple[PathSegment, ...]

ROOT_PATH: PlanPath = ()


def extend_path(
    path: PlanPath,
    variant: str,
    via: str | None,
    *,
    tag: int | None = None,
) -> PlanPath:
    """Return a new path with one more segment appended.

    Returns
    -------
    PlanPath
        Extended path.
    """
    return (*path, PathSegment(variant=variant, via=via, tag=tag))


def render_path(path: PlanPath) -> str:
    """Render a path as ``root/via:variant/...``.

    Returns
    -------
    str
        Slash-separated rendering, ``"<root>"`` for the empty path.
    """
    if not path:
        return "<root>"
    return "/".join(segment.render() for segment in path)


def join_label(prefix: str | None, label: str) -> str:
    """Compose nested field labels for non-node containers.

    Returns
    -------
    str
        ``prefix.label`` or ``label`` when there is no prefix.
    """
    if prefix is None:
        return label
    if label.startswith("["):
        return f"{prefix}{label}"
    return f"{prefix}.{label}"


__all__ = [
    "ROOT_PATH",
    "PathSegment",
    "PlanPath",
    "extend_path",
    "join_label",
    "render_path",
]
