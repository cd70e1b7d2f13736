"""Allow ``python -m amp_task_gateway``."""

from amp_task_gateway.cli import app

app(prog_name="amp-tasks")
