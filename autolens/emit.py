"""
autolens Emitter

Renders a GenerationPlan as Python source for the members added to the
class body. Emission order is fixed:

    (a) Fields namespace and the lens() accessor
    (b) _autolens_init, only when no author initializer was reused
    (c) AllLenses: one lens per public field, then the registry

Field order follows declaration order everywhere, so unchanged input always
renders to byte-identical text.
"""

from __future__ import annotations

from autolens.derive import INIT_NAME, GenerationPlan, LensPlan

INDENT = "    "
MARKER = "# Generated by autolens. Do not edit below this line."


def _ref(owner: str, name: str) -> str:
    # __name__ resolves to the defining module inside generated class bodies
    return f'FieldRef("{owner}", "{name}", __name__)'


def emit_accessor(plan: GenerationPlan) -> list[str]:
    path = plan.declaration.path
    lines = ["class Fields:"]
    public = plan.public_fields
    if not public:
        lines.append(f"{INDENT}pass")
    for f in public:
        lines.append(f"{INDENT}{f.name}: FieldRef[{path}, {f.type}] = {_ref(path, f.name)}")
    lines += [
        "",
        "@classmethod",
        f"def lens(cls, path: FieldRef[{path}, FocusT]) -> Lens[{path}, FocusT]:",
        f"{INDENT}return cls.AllLenses.registry.lookup(path)",
    ]
    return lines


def emit_initializer(plan: GenerationPlan) -> list[str]:
    params = ["cls"] + [str(p) for p in plan.initializer.parameters]
    lines = [
        "@classmethod",
        f"def {INIT_NAME}({', '.join(params)}) -> {plan.declaration.path}:",
        f"{INDENT}self = object.__new__(cls)",
    ]
    for name in plan.initializer.names:
        lines.append(f'{INDENT}object.__setattr__(self, "{name}", {name})')
    lines.append(f"{INDENT}return self")
    return lines


def emit_lens(plan: GenerationPlan, lens: LensPlan) -> list[str]:
    path = plan.declaration.path
    name = lens.field.name
    lines = [
        f"{name}: Lens[{path}, {lens.field.type}] = Lens(",
        f"{INDENT}getter=lambda whole: whole.{name},",
        f"{INDENT}setter=lambda whole, target: {plan.constructor}(",
    ]
    for param, argument in lens.arguments:
        lines.append(f"{INDENT * 2}{param}={argument},")
    lines += [
        f"{INDENT}),",
        ")",
    ]
    return lines


def emit_lenses(plan: GenerationPlan) -> list[str]:
    path = plan.declaration.path
    body: list[str] = []
    for lens in plan.lenses:
        body += emit_lens(plan, lens)
        body.append("")

    entries = [f"{_ref(path, lens.field.name)}: {lens.field.name}," for lens in plan.lenses]
    if entries:
        body += [
            f"registry: LensRegistry[{path}] = LensRegistry(",
            f'{INDENT}"{path}",',
            f"{INDENT}{{",
        ]
        body += [f"{INDENT * 2}{entry}" for entry in entries]
        body += [
            f"{INDENT}}},",
            ")",
        ]
    else:
        body.append(f'registry: LensRegistry[{path}] = LensRegistry("{path}", {{}})')

    return ["class AllLenses:"] + [f"{INDENT}{line}" if line else "" for line in body]


def emit_members(plan: GenerationPlan, indent: str = INDENT) -> str:
    """Source text of every generated member, indented for the class body."""
    blocks = [emit_accessor(plan)]
    if plan.emits_initializer:
        blocks.append(emit_initializer(plan))
    blocks.append(emit_lenses(plan))

    lines = ["", MARKER]
    for block in blocks:
        lines += block
        lines.append("")
    lines.pop()

    return "\n".join(f"{indent}{line}" if line else "" for line in lines) + "\n"
