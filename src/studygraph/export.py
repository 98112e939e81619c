"""
Printable export of a diagram's node and edge tables.

Produces a standalone HTML document; positions are not part of the export.
"""

import html
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import GraphDiagram


EXPORT_STYLE = """
      body { font-family: 'Segoe UI', sans-serif; padding: 40px; }
      h1 { color: #6366f1; border-bottom: 2px solid #6366f1; padding-bottom: 10px; }
      .description { color: #666; margin-bottom: 20px; }
      .section { margin: 20px 0; }
      table { width: 100%; border-collapse: collapse; margin-top: 10px; }
      th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
      th { background-color: #6366f1; color: white; }
"""


def _table(headings: list[str], rows: list[list[str]]) -> str:
    head = "".join(f"<th>{html.escape(h)}</th>" for h in headings)
    body = "".join(
        "<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in row) + "</tr>"
        for row in rows
    )
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def export_html(diagram: "GraphDiagram") -> str:
    """
    Build a printable HTML document describing a diagram.

    Missing levels and edge labels show as "-".

    Args:
        diagram: The diagram to export

    Returns:
        The HTML document as a string
    """
    title = html.escape(diagram.title)

    node_rows = [
        [n.id, n.label, str(n.level) if n.level is not None else "-"]
        for n in diagram.nodes
    ]
    edge_rows = [
        [e.source, e.target, e.label or "-"]
        for e in diagram.edges
    ]

    description = ""
    if diagram.description:
        description = f'<p class="description">{html.escape(diagram.description)}</p>'

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        f"  <head>\n    <title>{title}</title>\n    <style>{EXPORT_STYLE}    </style>\n  </head>\n"
        "  <body>\n"
        f"    <h1>{title}</h1>\n"
        f"    {description}\n"
        f"    <p><strong>Type:</strong> {html.escape(diagram.type)}</p>\n"
        '    <div class="section">\n'
        "      <h3>Nodes</h3>\n"
        f"      {_table(['ID', 'Label', 'Level'], node_rows)}\n"
        "    </div>\n"
        '    <div class="section">\n'
        "      <h3>Edges (Connections)</h3>\n"
        f"      {_table(['From', 'To', 'Label'], edge_rows)}\n"
        "    </div>\n"
        "  </body>\n"
        "</html>\n"
    )
