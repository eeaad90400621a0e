"""HTTP API and HTML page for the agent dashboard.

Every JSON response uses the same envelope: ``{"success": true, ...}`` on
success and ``{"success": false, "error": "..."}`` on failure.

Run with ``agent-dashboard serve`` or ``python -m agent_dashboard.server``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from pydantic import BaseModel, Field

from agent_dashboard import __version__
from agent_dashboard.agents.catalog import AgentCatalog
from agent_dashboard.agents.git_info import collect_git_info
from agent_dashboard.agents.launcher import AgentLauncher
from agent_dashboard.agents.monitor import ProcessMonitor
from agent_dashboard.config.settings import DashboardSettings
from agent_dashboard.engine.dashboard import DashboardService
from agent_dashboard.exceptions import (
    AgentError,
    ConfigurationError,
    DashboardError,
    IssueNotFoundError,
    ProjectNotFoundError,
)

log = structlog.get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


class AssignAgentRequest(BaseModel):
    action: str = Field(..., description="Only 'assign-agent' is supported")
    project: str
    agent_id: str
    issue_id: int | None = Field(default=None, description="GitHub issue id")
    issue_number: int | None = Field(default=None, description="Issue number, preferred over issue_id")


class RunAgentRequest(BaseModel):
    agent_id: str
    agent_name: str | None = None
    project: str | None = None
    project_path: str | None = None


class FocusTerminalRequest(BaseModel):
    window_title: str
    process_id: int | None = None


class StartServerRequest(BaseModel):
    project: str | None = None
    project_path: str | None = None
    server_name: str = "Dashboard Server"
    port: int = Field(default=3500, ge=1, le=65535)


def ok(**payload: Any) -> dict[str, Any]:
    return {"success": True, **jsonable_encoder(payload)}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app(
    settings: DashboardSettings | None = None,
    service: DashboardService | None = None,
    launcher: AgentLauncher | None = None,
    monitor: ProcessMonitor | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators default to ones built from ``settings``; tests pass fakes.
    """
    settings = settings or DashboardSettings()
    service = service or DashboardService.from_settings(settings)
    catalog = launcher.catalog if launcher else AgentCatalog(settings.projects, settings.agents)
    launcher = launcher or AgentLauncher(catalog, settings.agents)
    monitor = monitor or ProcessMonitor(settings.projects, settings.agents.universal_path)
    templates = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        undefined=StrictUndefined,
        autoescape=select_autoescape(["html", "j2"]),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.connect()
        log.info("dashboard_server_started", projects=len(settings.projects))
        yield
        await service.disconnect()

    app = FastAPI(title="Agent Dashboard", version=__version__, lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
        return error_response(422, f"Invalid request: {details}")

    @app.exception_handler(ProjectNotFoundError)
    @app.exception_handler(IssueNotFoundError)
    async def not_found_handler(request: Request, exc: DashboardError) -> JSONResponse:
        return error_response(404, exc.message)

    @app.exception_handler(DashboardError)
    async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
        status_code = 422 if isinstance(exc, AgentError | ConfigurationError) else 500
        log.error("request_failed", path=request.url.path, error=str(exc))
        return error_response(status_code, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error("request_unexpected", path=request.url.path, error=str(exc), exc_info=True)
        return error_response(500, str(exc) or "Internal server error")

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        template = templates.get_template("dashboard.html.j2")
        return template.render(
            projects=settings.projects,
            agents=catalog.list_agents(),
            version=__version__,
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "agent-dashboard"}

    @app.get("/api/github-issues")
    async def github_issues(project: str | None = None):
        issues = await service.list_board_issues(project)
        return ok(issues=issues, total=len(issues))

    @app.post("/api/github-issues")
    async def update_github_issue(body: AssignAgentRequest):
        if body.action != "assign-agent":
            return error_response(400, "Invalid action")
        if body.issue_id is None and body.issue_number is None:
            return error_response(400, "issue_id or issue_number is required")

        issue = await service.assign_agent(body.project, body.agent_id, body.issue_id, body.issue_number)
        return ok(message="Agent assigned successfully", issue=issue)

    @app.get("/api/issue-tracking")
    async def issue_tracking(project: str | None = None):
        report = await service.issue_tracking(project)
        return ok(
            issue_tracking=report.issue_tracking,
            manager_alerts=report.manager_alerts,
            summary=report.summary,
            errors=report.errors,
        )

    @app.get("/api/commit-analysis")
    async def commit_analysis(project: str | None = None):
        report = await service.commit_analysis(project)
        return ok(commit_analysis=report.commit_analysis, summary=report.summary)

    @app.get("/api/developer-performance")
    async def developer_performance(weeks: int = Query(default=4, ge=1, le=52)):
        report = await service.developer_performance(weeks)
        return ok(period=report.period, developers=report.developers, summary=report.summary)

    @app.get("/api/agents")
    async def list_agents(project: str | None = None):
        agents = catalog.list_agents(project)
        return ok(agents=agents, count=len(agents))

    @app.post("/api/run-agent")
    async def run_agent(body: RunAgentRequest):
        result = await launcher.launch(body.agent_id, body.agent_name, body.project, body.project_path)
        return ok(message=result.message, launch=result)

    @app.get("/api/check-running-agents")
    async def check_running_agents():
        agents = monitor.running_agents()
        return ok(running_agents=agents, count=len(agents))

    @app.post("/api/focus-terminal")
    async def focus_terminal(body: FocusTerminalRequest):
        focused = await launcher.focus(body.window_title)
        if not focused:
            return {"success": False, "message": f"Terminal window not found for {body.window_title}"}
        return ok(message=f"Focused terminal for {body.window_title}")

    @app.post("/api/start-server")
    async def start_server(body: StartServerRequest):
        result = await launcher.start_dev_server(body.project_path, body.server_name, body.port, body.project)
        return ok(message=result.message, url=result.url, process_id=result.pid, window_title=result.window_title)

    @app.get("/api/get-git-info")
    async def get_git_info():
        projects = await collect_git_info(settings.projects, settings.agents.command_timeout)
        return ok(projects=projects)

    return app


if __name__ == "__main__":
    import uvicorn

    app_settings = DashboardSettings()
    uvicorn.run(create_app(app_settings), host=app_settings.server.host, port=app_settings.server.port)
