import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from . import __version__
from .artifacts import review_document
from .config import WorkflowConfig, configure_logging
from .progression import ProgressionController
from .reconcile import ReconciliationEngine
from .signals import ArtifactWatcher, CompletionSignalDispatcher
from .status import ProjectLayout, StatusStore, is_valid_project_id
from .workflow import catalog
from .workflow.catalog import Role
from .workflow.contracts import PhaseStatus, StatusRecord

logger = logging.getLogger(__name__)

_PROJECT_ID_SCHEMA = {
    "type": "object",
    "properties": {
        "project_id": {
            "type": "string",
            "description": "Project folder name under the outputs projects/ directory"
        }
    },
    "required": ["project_id"]
}


def _text(payload) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


def _status_summary(record: StatusRecord) -> dict:
    """What the UI needs to render the current step."""
    summary = {
        "current_role": record.current_role.value if record.current_role else catalog.TERMINAL,
        "current_phase_key": record.current_phase_key,
        "phase_status": None,
        "needs_review": False,
        "review_document": None,
        "human_required": False,
    }
    phase = record.current_phase
    phase_record = record.current_phase_record()
    if phase is None or phase_record is None:
        return summary

    summary["phase_status"] = phase_record.status.value
    summary["human_required"] = phase in catalog.HUMAN_REQUIRED_PHASES
    if phase_record.status is PhaseStatus.USER_REVIEWING:
        summary["needs_review"] = True
        summary["review_document"] = review_document(record.current_role, phase)
    return summary


class SpecflowMCPServer:

    def __init__(self, workspace: Path | None = None, config: WorkflowConfig | None = None):
        self.workspace = Path(workspace) if workspace else Path.cwd()
        self.config = config or WorkflowConfig.load(self.workspace)
        self.layout = ProjectLayout(self.config.outputs_path(self.workspace))
        self.store = StatusStore(self.layout)
        self.controller = ProgressionController(self.store, self.config.stale_after_seconds)
        self.reconciler = ReconciliationEngine(self.store)
        self.dispatcher = CompletionSignalDispatcher(
            self.store,
            self.controller,
            signal_floor_bytes=self.config.signal_floor_bytes,
            min_phase_seconds=self.config.min_phase_seconds,
        )
        self.watcher = ArtifactWatcher(
            self.layout.outputs_dir,
            self.dispatcher.handle_change,
            debounce_seconds=self.config.debounce_seconds,
            poll_interval_seconds=self.config.poll_interval_seconds,
        )
        self._server = Server("specflow")
        self._register_handlers()

    def _register_handlers(self):
        self._server.list_tools()(self._list_tools)
        self._server.call_tool()(self._call_tool)

    async def _list_tools(self) -> list[Tool]:
        return [
            Tool(
                name="initialize_project",
                description="Create the status record for a new project, starting at product questions.",
                inputSchema=_PROJECT_ID_SCHEMA,
            ),
            Tool(
                name="get_project_status",
                description=(
                    "Load a project's workflow status. Repairs drift against the files on disk "
                    "and picks up output the assistant wrote while nothing was watching."
                ),
                inputSchema=_PROJECT_ID_SCHEMA,
            ),
            Tool(
                name="start_phase",
                description="Mark the current phase as being worked on by the assistant.",
                inputSchema=_PROJECT_ID_SCHEMA,
            ),
            Tool(
                name="complete_phase",
                description=(
                    "Complete the named phase and advance. Ignored unless role and phase "
                    "match the project's current position."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {"type": "string"},
                        "role": {
                            "type": "string",
                            "enum": [role.value for role in catalog.ROLE_SEQUENCE],
                        },
                        "phase": {
                            "type": "string",
                            "description": "Phase name, e.g. prd-review"
                        }
                    },
                    "required": ["project_id", "role", "phase"]
                }
            ),
            Tool(
                name="recover_stale_phase",
                description="Reset a phase stuck in ai-working without usable output so it can be retried.",
                inputSchema=_PROJECT_ID_SCHEMA,
            ),
            Tool(
                name="validate_phase",
                description=(
                    "Check that the files the current phase builds on exist. "
                    "With recover=true, rewind to the phase that must produce them."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "project_id": {"type": "string"},
                        "recover": {
                            "type": "boolean",
                            "description": "Rewind when invalid (default: false)"
                        }
                    },
                    "required": ["project_id"]
                }
            ),
            Tool(
                name="check_drift",
                description="Report status drift without repairing it.",
                inputSchema=_PROJECT_ID_SCHEMA,
            ),
            Tool(
                name="health_check",
                description="Check server health status.",
                inputSchema={
                    "type": "object",
                    "properties": {}
                }
            ),
        ]

    async def _call_tool(self, name: str, arguments: dict) -> list[TextContent]:
        if "project_id" in arguments and not is_valid_project_id(arguments["project_id"]):
            return [TextContent(type="text", text=f"Invalid project id: {arguments['project_id']}")]

        if name == "initialize_project":
            return self._handle_initialize_project(arguments)
        elif name == "get_project_status":
            return self._handle_get_project_status(arguments)
        elif name == "start_phase":
            return self._handle_start_phase(arguments)
        elif name == "complete_phase":
            return self._handle_complete_phase(arguments)
        elif name == "recover_stale_phase":
            return self._handle_recover_stale_phase(arguments)
        elif name == "validate_phase":
            return self._handle_validate_phase(arguments)
        elif name == "check_drift":
            return self._handle_check_drift(arguments)
        elif name == "health_check":
            return self._handle_health_check(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    def _handle_initialize_project(self, arguments: dict) -> list[TextContent]:
        project_id = arguments["project_id"]
        if self.store.exists(project_id):
            return [TextContent(type="text", text=f"Project already exists: {project_id}")]
        record = self.store.initialize(project_id)
        return _text({"status": record.to_dict(), "summary": _status_summary(record)})

    def _handle_get_project_status(self, arguments: dict) -> list[TextContent]:
        """Reconcile, then run the retroactive completion check."""
        project_id = arguments["project_id"]
        result = self.reconciler.reconcile(project_id)
        if result.status is None:
            return [TextContent(type="text", text=f"Project not found: {project_id}")]

        signal = self.dispatcher.retroactive_check(project_id)
        record = self.store.read(project_id) or result.status
        return _text({
            "status": record.to_dict(),
            "summary": _status_summary(record),
            "had_drift": result.had_drift,
            "drift": [
                {"rule_id": d.rule_id, "description": d.description,
                 "stored_status": d.stored_status, "fixed_to": d.fixed_to}
                for d in result.drift_details
            ],
            "retroactive_advance": signal.accepted,
        })

    def _handle_start_phase(self, arguments: dict) -> list[TextContent]:
        record = self.controller.start_work(arguments["project_id"])
        return self._record_response(arguments["project_id"], record)

    def _handle_complete_phase(self, arguments: dict) -> list[TextContent]:
        project_id = arguments["project_id"]
        try:
            role = Role(arguments["role"])
        except ValueError:
            return [TextContent(type="text", text=f"Unknown role: {arguments['role']}")]
        record = self.controller.complete_and_advance(project_id, role, arguments["phase"])
        return self._record_response(project_id, record)

    def _handle_recover_stale_phase(self, arguments: dict) -> list[TextContent]:
        record = self.controller.recover_stale_phase(arguments["project_id"])
        return self._record_response(arguments["project_id"], record)

    def _handle_validate_phase(self, arguments: dict) -> list[TextContent]:
        project_id = arguments["project_id"]
        validation = self.reconciler.validate_current_phase(project_id)
        result = {
            "is_valid": validation.is_valid,
            "suggested_phase": validation.suggested_phase,
            "reason": validation.reason,
            "failures": validation.failures,
        }
        if arguments.get("recover", False) and not validation.is_valid:
            record = self.reconciler.recover_current_phase(project_id)
            if record is not None:
                result["summary"] = _status_summary(record)
        return _text(result)

    def _handle_check_drift(self, arguments: dict) -> list[TextContent]:
        report = self.reconciler.check_for_drift(arguments["project_id"])
        return _text({"has_drift": report.has_drift, "issues": report.issues})

    def _handle_health_check(self, arguments: dict) -> list[TextContent]:
        """Returns server status."""
        result = {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "version": __version__,
            "outputs_dir": str(self.layout.outputs_dir),
        }
        return _text(result)

    def _record_response(self, project_id: str, record: StatusRecord | None) -> list[TextContent]:
        if record is None:
            return [TextContent(type="text", text=f"Project not found: {project_id}")]
        return _text({"status": record.to_dict(), "summary": _status_summary(record)})

    async def run(self):
        watch_task = asyncio.create_task(self.watcher.run())
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
        finally:
            self.watcher.stop()
            watch_task.cancel()


def main():
    configure_logging()
    workspace = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    server = SpecflowMCPServer(workspace)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
