"""
Diagram validation - Check descriptors for data-quality issues.

Nothing reported here stops a diagram from rendering: dangling and
self-referencing edges are simply not drawn. The report lets callers see
what was degraded.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .models import DiagramType, is_hierarchical

if TYPE_CHECKING:
    from .models import GraphDiagram


KNOWN_TYPES = frozenset(t.value for t in DiagramType)


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Descriptor is inconsistent
    WARNING = "warning"  # Part of the diagram will not render
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a diagram."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_index: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_index is not None:
            result["edge_index"] = self.edge_index
        return result


def validate_diagram(diagram: "GraphDiagram") -> list[ValidationIssue]:
    """
    Validate a diagram descriptor and return a list of issues.

    Checks for:
    - Empty diagram - INFO
    - Unknown diagram type (circular fallback) - WARNING
    - Duplicate node ids - ERROR
    - Edges referencing missing nodes - WARNING
    - Self-referencing edges - WARNING
    - Duplicate edges (same source->target) - WARNING
    - Levels on a non-hierarchical diagram - INFO

    Args:
        diagram: The diagram to validate

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []

    if diagram.type not in KNOWN_TYPES:
        issues.append(ValidationIssue(
            severity=IssueSeverity.WARNING,
            message=f"Unknown diagram type '{diagram.type}', using circular layout"
        ))

    if not diagram.nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Diagram has no nodes"
        ))
        return issues

    # Duplicate ids collapse to a single position
    seen_ids: set[str] = set()
    for node in diagram.nodes:
        if node.id in seen_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Duplicate node id: {node.id}",
                node_id=node.id
            ))
        seen_ids.add(node.id)

    for index, edge in enumerate(diagram.edges):
        if edge.source not in seen_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_index=index
            ))
        if edge.target not in seen_ids:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_index=index
            ))

    for index, edge in enumerate(diagram.edges):
        if edge.source == edge.target:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Self-referencing edge is not drawn",
                node_id=edge.source,
                edge_index=index
            ))

    seen_pairs: set[tuple[str, str]] = set()
    for index, edge in enumerate(diagram.edges):
        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Duplicate edge from {edge.source} to {edge.target}",
                edge_index=index
            ))
        else:
            seen_pairs.add(pair)

    if not is_hierarchical(diagram.type):
        leveled = [n.id for n in diagram.nodes if n.level is not None]
        if leveled:
            issues.append(ValidationIssue(
                severity=IssueSeverity.INFO,
                message=f"Levels are ignored for '{diagram.type}' diagrams ({len(leveled)} nodes)"
            ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
