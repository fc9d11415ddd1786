"""JSON report generator for SSRP discovery results."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from ..messages.schema import Instance


class JsonReporter:
    """Generates JSON reports from discovery results."""

    def generate(
        self,
        command: str,
        target: str,
        result: Union[list[Instance], int, None],
        duration_ms: int = 0,
        instance: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a report from a discovery result.

        Args:
            command: CLI command that produced the result.
            target: Address the request was sent to.
            result: Instance list, DAC port, or None.
            duration_ms: Exchange duration in milliseconds.
            instance: Instance name the request asked for, if any.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        report: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "command": command,
            "target": target,
            "duration_ms": duration_ms,
        }
        if instance is not None:
            report["instance"] = instance

        if isinstance(result, list):
            report["count"] = len(result)
            report["instances"] = [i.to_dict() for i in result]
        else:
            report["port"] = result

        return report

    def save(self, report: dict[str, Any], path: Union[str, Path]) -> Path:
        """Save report to a JSON file.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, output: dict[str, Any], pretty: bool = False) -> str:
        if pretty:
            return json.dumps(output, indent=2, ensure_ascii=False)
        return json.dumps(output, ensure_ascii=False)

    def generate_flow_output(self, report: dict[str, Any]) -> dict[str, Any]:
        """Wrap a report in the CLI output envelope.

        {
            "success": bool,
            "command": "list-all",
            "data": { ... },
            "message": str
        }

        A list command always succeeds, even with no instances; a
        dac-port command succeeds only when a port was returned.
        """
        if "instances" in report:
            success = True
            count = report["count"]
            message = f"Found {count} instance{'' if count == 1 else 's'}"
        elif report.get("port") is not None:
            success = True
            message = f"DAC port {report['port']}"
        else:
            success = False
            message = "DAC port could not be retrieved"

        return {
            "success": success,
            "command": report["command"],
            "data": report,
            "message": message,
        }
