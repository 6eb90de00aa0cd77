"""Closed vocabulary of configuration nodes.

One immutable table serves two consumers: the extractor uses its keys as the
allow-list of node names, and the augmenter uses the entries as the baseline
catalog that fills gaps left by extraction.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class KnownNode:
    """Curated baseline definition for one configuration node."""

    description: str
    properties: tuple[str, ...]


KNOWN_NODES: Mapping[str, KnownNode] = MappingProxyType(
    {
        "agents": KnownNode(
            "Agent defaults and the list of configured agents",
            ("defaults", "list", "models", "workspace"),
        ),
        "audio": KnownNode(
            "Audio transcription and playback settings",
            ("transcription", "provider"),
        ),
        "auth": KnownNode(
            "Authentication profiles and credential order",
            ("profiles", "order"),
        ),
        "bindings": KnownNode(
            "Routing rules binding channels and peers to agents",
            ("agentId", "match"),
        ),
        "browser": KnownNode(
            "Managed browser control",
            ("enabled", "profiles", "headless"),
        ),
        "channels": KnownNode(
            "Messaging channel integrations",
            ("whatsapp", "telegram", "discord", "slack", "signal"),
        ),
        "commands": KnownNode(
            "Chat command handling",
            ("native", "text", "restart"),
        ),
        "cron": KnownNode(
            "Scheduled jobs",
            ("enabled", "store", "maxConcurrentRuns"),
        ),
        "diagnostics": KnownNode(
            "Diagnostic flags and tracing",
            ("enabled", "flags"),
        ),
        "gateway": KnownNode(
            "Gateway server binding, mode and authentication",
            ("port", "mode", "bind", "auth", "controlUi"),
        ),
        "hooks": KnownNode(
            "Webhook endpoints and internal hooks",
            ("enabled", "path", "token", "mappings"),
        ),
        "logging": KnownNode(
            "Log levels and output files",
            ("level", "file", "consoleLevel", "redactSensitive"),
        ),
        "messages": KnownNode(
            "Message prefixes, acknowledgements and queueing",
            ("responsePrefix", "ackReaction", "queue"),
        ),
        "meta": KnownNode(
            "Bookkeeping written by the application itself",
            ("lastTouchedVersion", "lastTouchedAt"),
        ),
        "models": KnownNode(
            "Model providers and catalog mode",
            ("mode", "providers"),
        ),
        "plugins": KnownNode(
            "Plugin loading and per-plugin entries",
            ("enabled", "allow", "deny", "load", "entries"),
        ),
        "session": KnownNode(
            "Session scoping and reset policy",
            ("scope", "dmScope", "reset", "store"),
        ),
        "skills": KnownNode(
            "Skill loading and installation",
            ("allowBundled", "load", "install", "entries"),
        ),
        "talk": KnownNode(
            "Voice talk mode",
            ("voiceId", "modelId", "apiKey"),
        ),
        "tools": KnownNode(
            "Tool policy and per-tool settings",
            ("profile", "allow", "deny", "exec", "web"),
        ),
        "update": KnownNode(
            "Update channel and startup checks",
            ("channel", "checkOnStart"),
        ),
        "web": KnownNode(
            "Web channel runtime settings",
            ("enabled", "heartbeatSeconds", "reconnect"),
        ),
    }
)

VALID_NODE_NAMES: frozenset[str] = frozenset(KNOWN_NODES)


def is_valid_node_name(name: str) -> bool:
    """Whether ``name`` is one of the known configuration nodes."""
    return name in VALID_NODE_NAMES
