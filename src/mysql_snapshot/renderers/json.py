"""JSON renderer backed by orjson."""

from mysql_snapshot.models.snapshot import Snapshot
from mysql_snapshot.renderers.base import BaseRenderer
from mysql_snapshot.utils.serialization import dumps


class JSONRenderer(BaseRenderer):
    """Renders the full snapshot model as indented JSON with sorted keys."""

    format_name = "json"

    def render(self, snapshot: Snapshot) -> str:
        return dumps(snapshot.model_dump(mode="json"), indent=True) + "\n"
