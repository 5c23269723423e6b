import json, pathlib

EMPTY_MESSAGE = "No TODO items found in this vault."

def render_markdown(groups) -> str:
    if not groups:
        return EMPTY_MESSAGE + "\n"
    parts = []
    for g in groups:
        parts.append(f"## {g.doc.display_name}\n")
        parts.append(f"<!-- {g.path} -->\n")
        parts.extend(f"- {item}\n" for item in g.items)
        parts.append("\n")
    return "".join(parts)

def render_json(groups) -> str:
    return json.dumps({"groups": [g.to_dict() for g in groups]}, ensure_ascii=False, indent=2)

def render(groups, fmt="md") -> str:
    if fmt == "json":
        return render_json(groups)
    if fmt == "md":
        return render_markdown(groups)
    raise ValueError(f"unknown export format '{fmt}'")

def export_todos(groups, out: pathlib.Path, fmt="md"):
    body = render(groups, fmt)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(body, encoding='utf-8')
