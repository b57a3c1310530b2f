from dataclasses import dataclass
from typing import Optional

from .grafana_model import GrafanaDashboard, GrafanaPanel


@dataclass(frozen=True, slots=True)
class ProcessingIssue:
    message: str
    dashboard: GrafanaDashboard
    panel: Optional[GrafanaPanel]
    link: str
    notes: str = ""
    error_level: str = "INFO"

    def csv(self):
        panel_title = self.panel.title if self.panel else ""
        panel_id = self.panel.id if self.panel else ""
        return f"{self.c(self.message)},{self.c(self.dashboard.folder)},{self.c(self.dashboard.title)},{self.c(panel_title)},{self.c(panel_id)},{self.c(self.error_level)},{self.c(self.notes)},{self.c(self.dashboard.updater)},{self.c(self.link)}"

    def c(self, s):
        return str(s).replace(",", "")

    @classmethod
    def csv_header(cls):
        return "Message,Folder,Dashboard,Panel,PanelId,ErrorLevel,Notes,Updater,Link"


class ProcessingContext:
    def __init__(
        self,
        dashboard: Optional[GrafanaDashboard] = None,
        panel: Optional[GrafanaPanel] = None,
        grafana_url: Optional[str] = None,
        grafana_organization_id: Optional[str | int] = None,
    ):
        self.dashboard = dashboard
        self.panel = panel
        self.grafana_url = grafana_url
        self.grafana_organization_id = grafana_organization_id

    def __str__(self):
        return f"ProcessingContext[Dashboard:{self.dashboard.title if self.dashboard else 'None'},Panel:{self.panel.title if self.panel else 'None'},DashUID:{self.dashboard.uid if self.dashboard else 'None'}]"


class ErrorManager:
    LOG_LEVELS = {
        "DEBUG": "debug",
        "INFO": "info",
        "WARN": "warning",
        "ERROR": "error",
    }

    def __init__(self, logger, processing_context: ProcessingContext):
        self._issues = []
        self._logger = logger
        self.context = processing_context

    @property
    def issues(self):
        return list(self._issues)

    def errors_csv(self) -> str:
        if self._issues:
            return "\n".join(
                [ProcessingIssue.csv_header()] + [x.csv() for x in self._issues]
            )
        else:
            return ""

    def _debug_link(self):
        if (
            self.context.dashboard
            and self.context.panel
            and self.context.grafana_organization_id
            and self.context.grafana_url
        ):
            return f"{self.context.grafana_url}/d/{self.context.dashboard.uid}?viewPanel={self.context.panel.id}&orgId={self.context.grafana_organization_id}"
        else:
            return "Cannot-Calculate-Link"

    def add_error(self, msg, error_level="INFO", notes="", panel: Optional[dict] = None):
        log = getattr(self._logger, self.LOG_LEVELS.get(error_level, "error"))
        log(msg)
        if panel is not None:
            self.context.panel = GrafanaPanel.from_panel(panel)
        msg = msg.replace(",", "-")
        if self.context.dashboard:
            self._issues.append(
                ProcessingIssue(
                    error_level=error_level,
                    message=msg,
                    notes=notes,
                    dashboard=self.context.dashboard,
                    panel=self.context.panel,
                    link=self._debug_link(),
                )
            )
