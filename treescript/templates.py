"""
Statement templates for the two output densities.

All templates are printf-style. Quoted arguments (class and service
names) are passed already quoted with literals.quote_string().
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Templates:
    instance: str
    property: str
    get_service: str
    require_object: str
    require_children: str
    require_root: str


VERBOSE_TEMPLATES = Templates(
    instance="local %s = Instance.new(%s)",
    property="%s.%s = %s",
    get_service="game:GetService(%s)",
    require_object="%s = require(%s)",
    require_children=(
        "\nfor _, v in ipairs(script:GetChildren()) do\n"
        "    require(v).Parent = %s\n"
        "end\n"
    ),
    require_root="return require(%s)",
)

COMPACT_TEMPLATES = Templates(
    instance="local %s=Instance.new%s",
    property="%s.%s=%s",
    get_service="game:GetService%s",
    require_object="%s=require(%s)",
    require_children="\nfor _,v in next,script:GetChildren() do require(v).Parent=%s end\n",
    require_root="return require(%s)",
)


def templates_for(verbose: bool) -> Templates:
    return VERBOSE_TEMPLATES if verbose else COMPACT_TEMPLATES
