"""
Config-to-kernel bridges.

Translates parsed catalog templates into kernel ``BlueprintDraft`` values.
The kernel never imports ``blueprint_config``; this is the one place the
two meet.
"""

from __future__ import annotations

from collections.abc import Iterable

from blueprint_config.schema import BlueprintTemplate
from blueprint_kernel.domain.blueprint import BlueprintDraft, BlueprintField, Position


def template_to_draft(template: BlueprintTemplate) -> BlueprintDraft:
    """
    Raises:
        UnknownFieldTypeError: a template field uses a kind the kernel
            does not know.
    """
    return BlueprintDraft(
        name=template.name,
        description=template.description,
        fields=tuple(
            BlueprintField(
                id=f.id,
                type=f.type,
                label=f.label,
                position=Position(x=f.x, y=f.y),
                required=f.required,
            )
            for f in template.fields
        ),
    )


def templates_to_drafts(templates: Iterable[BlueprintTemplate]) -> tuple[BlueprintDraft, ...]:
    return tuple(template_to_draft(t) for t in templates)
