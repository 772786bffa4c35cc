"""JSON export of a configuration run."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from cmakebase.runtime.configure import ConfigureResult

logger = logging.getLogger("cmakebase.export.json")


def result_to_dict(result: ConfigureResult) -> Dict[str, Any]:
    context = result.context
    return {
        "project": result.project,
        "version": result.version.version,
        "build_type": context.build_type,
        "build_mode": context.build_mode.value,
        "compiler_id": context.compiler_id,
        "compiler_family": context.compiler_family.value,
        "toolchain": context.toolchain.model_dump(mode="json") if context.toolchain else None,
        "layers": list(context.layers),
        "variables": dict(sorted(context.variables.items())),
        "targets": {
            name: {
                "compile_options": target.compile_options,
                "link_options": target.link_options,
                "compile_definitions": target.compile_definitions,
                "results": [
                    {
                        "function": r.function,
                        "outcome": r.outcome.value,
                        "items": list(r.items),
                        "reason": r.reason,
                    }
                    for r in result.results_for(name)
                ],
            }
            for name, target in result.targets.items()
        },
    }


def export_json(result: ConfigureResult, output_path: Path) -> None:
    """Export a configuration run to JSON format.

    Args:
        result: Configuration run to export.
        output_path: Output file path.
    """
    logger.info("Exporting configuration to JSON: %s", output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2, ensure_ascii=False)

    logger.info("JSON export completed: %d target(s)", len(result.targets))
