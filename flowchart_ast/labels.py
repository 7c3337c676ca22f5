import ast
from typing import Sequence

from .humanize import humanize

MAX_LABEL_CHARS = 80
LINE_BREAK = "<br>"


def clean_phrase(text: str) -> str:
    # Mermaid labels are quoted and braces open decision shapes
    text = text.replace("\n", " ").replace("\t", " ")
    text = text.replace('"', "'").replace("{", "").replace("}", "")
    text = text.strip()
    if len(text) > MAX_LABEL_CHARS:
        text = text[:MAX_LABEL_CHARS - 3] + "..."
    return text


def format_label(nodes: Sequence[ast.AST]) -> str:
    return LINE_BREAK.join(clean_phrase(humanize(n)) for n in nodes)
