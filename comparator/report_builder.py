"""
Report Builder Module
Renders unused/undefined class findings as diagnostics and JSON reports.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Union


def format_unused_message(stylesheet_path: Union[str, Path], class_names: Iterable[str]) -> str:
    return f"Unused classes found in {Path(stylesheet_path).name}: {', '.join(class_names)}"


def format_undefined_message(class_name: str) -> str:
    return f"Class or exported property '{class_name}' not found"


def format_diagnostic(source_path: Union[str, Path], finding) -> str:
    """`path:line:col: message`, the shape most editors can jump to."""
    line = finding.line if finding.line is not None else 1
    column = finding.column if finding.column is not None else 1
    return f"{source_path}:{line}:{column}: {finding.message}"


def build_json_report(results: Dict[str, Any]) -> str:
    """
    Serialize analysis results keyed by source path.

    Args:
        results: {source_path: AnalysisResult}

    Returns:
        JSON document with one entry per source file that has findings
    """
    report = {
        str(path): result.to_dict()
        for path, result in results.items()
        if result.unused or result.undefined
    }
    return json.dumps(report, indent=2)
