#!/usr/bin/env python3
"""
Regenerate ascon*.py parameter-set modules from the canonical template ascon128.py.

Changes per variant:
- Replace module name (ascon128 -> target)
- Replace label (Ascon-128 -> target label like Ascon-96)
- Replace the ParameterSet constant (ASCON_128 -> target)

Everything else, formatting included, is copied from the template.
"""

import pathlib
import re
import sys

ROOT = (
    pathlib.Path(__file__).resolve().parents[1]
    if (pathlib.Path(__file__).resolve().parents[0].name == "tools")
    else pathlib.Path.cwd()
)
PKG_DIR = ROOT / "asconmesh"
TEMPLATE = PKG_DIR / "ascon128.py"

# Variants to generate (template excluded)
VARIANTS = ("ascon96",)

TEMPLATE_NAME = "ascon128"
TEMPLATE_LABEL = "Ascon-128"
TEMPLATE_CONST = "ASCON_128"

NAME_RE = re.compile(r"^ascon(\d+)$")


def variant_bits(name: str) -> str:
    """Return the key size suffix, e.g. "96" for ascon96."""
    m = NAME_RE.match(name)
    if not m:
        raise ValueError(f"Unexpected variant name: {name}")
    return m.group(1)


def generate_variant(template_src: str, variant: str) -> str:
    bits = variant_bits(variant)
    # the header comment names the template and must survive
    header, sep, body = template_src.partition("import secrets")
    header = header.replace(f'"""{TEMPLATE_LABEL}"""', f'"""Ascon-{bits}"""')
    body = body.replace(TEMPLATE_NAME, variant)
    body = body.replace(TEMPLATE_LABEL, f"Ascon-{bits}")
    body = body.replace(TEMPLATE_CONST, f"ASCON_{bits}")
    return header + sep + body


def main() -> int:
    if not TEMPLATE.exists():
        print(f"Template not found: {TEMPLATE}", file=sys.stderr)
        return 2
    template_src = TEMPLATE.read_text(encoding="utf-8")

    # Safety: ensure we are working from an up-to-date template that contains expected tokens
    if TEMPLATE_CONST not in template_src or TEMPLATE_LABEL not in template_src:
        print(
            "Template file does not contain expected identifiers; aborting.",
            file=sys.stderr,
        )
        return 3

    wrote = []
    for variant in VARIANTS:
        dst = PKG_DIR / f"{variant}.py"
        dst.write_text(generate_variant(template_src, variant), encoding="utf-8")
        wrote.append(dst.relative_to(ROOT))

    print("Generated modules:")
    for p in wrote:
        print(" -", p)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
