"""Output formatters for verification and stamping results."""

import json

from traceprov.models import (
    BoxInfo,
    EmbeddedMetadata,
    StampResult,
    VerificationReport,
    VerificationState,
)

STATE_ICONS = {
    VerificationState.VALID: "✓",
    VerificationState.INVALID: "✗",
    VerificationState.INCONCLUSIVE: "?",
}


def format_default(report: VerificationReport) -> str:
    """Format a verification report for the terminal.

    Shows the outcome and reason, then the manifest summary when one was
    recovered.
    """
    lines = [f"{STATE_ICONS[report.state]} {report.state.value}", f"  {report.message}"]

    manifest = report.manifest
    if manifest is not None:
        lines.append("")
        lines.append(f"  Provider:     {manifest.provider.name} ({manifest.provider.id})")
        lines.append(f"  Model:        {manifest.model.id} v{manifest.model.version}")
        lines.append(f"  Operation:    {manifest.operation.value}")
        lines.append(f"  Created:      {manifest.timestamps.created_utc}")
        lines.append(f"  Output hash:  {manifest.output.hash}")
        if manifest.input.hash:
            lines.append(f"  Input hash:   {manifest.input.hash}")
        if report.source:
            lines.append(f"  Source:       {report.source}")

    return "\n".join(lines)


def format_quiet(report: VerificationReport) -> str:
    """Format a verification report as one line.

    Format: path | STATE | reason
    """
    return " | ".join([report.path, report.state.value, report.message])


def format_json(report: VerificationReport, indent: int = 2) -> str:
    """Format a verification report as JSON."""
    return report.model_dump_json(indent=indent)


def format_stamp(result: StampResult) -> str:
    """Summarize a stamp operation."""
    manifest = result.manifest
    lines = [
        "✓ Provenance manifest created successfully",
        f"  Operation:  {manifest.operation.value}",
        f"  Provider:   {manifest.provider.name} ({manifest.provider.id})",
        f"  Model:      {manifest.model.id} v{manifest.model.version}",
        f"  Manifest:   {result.manifest_path}",
        f"  Signature:  {result.signature_path}",
    ]
    if result.embedded:
        lines.append("  Embedded:   yes")
    return "\n".join(lines)


def format_boxes(boxes: list[BoxInfo]) -> str:
    """Format a box tree, one box per line, indented by depth."""
    lines = []
    for box in boxes:
        line = f"{'  ' * box.depth}{box.type}  size={box.size}  offset={box.offset}"
        if box.data_preview:
            line += f"  [{box.data_preview}]"
        lines.append(line)
    return "\n".join(lines)


def format_embedded(embedded: EmbeddedMetadata | None) -> str:
    """Summarize embedded TRACE metadata."""
    if embedded is None:
        return "Embedded TRACE metadata: none"
    try:
        manifest = json.loads(embedded.manifest)
    except ValueError:
        return "Embedded TRACE metadata: present (manifest is not valid JSON)"
    if not isinstance(manifest, dict):
        return "Embedded TRACE metadata: present (manifest is not a JSON object)"
    output = manifest.get("output") or {}
    return "\n".join(
        [
            "Embedded TRACE metadata: present",
            f"  Operation:    {manifest.get('operation')}",
            f"  Output hash:  {output.get('hash') if isinstance(output, dict) else None}",
            f"  Nonce:        {manifest.get('nonce')}",
        ]
    )
