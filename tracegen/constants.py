"""Shared constants for landscape generation and trace simulation."""

from __future__ import annotations

# Semantic-convention span attribute keys
ATTR_SERVICE_NAME = "service.name"
ATTR_CODE_NAMESPACE = "code.namespace"
ATTR_CODE_FUNCTION_NAME = "code.function.name"

# Synthetic namespace wrapped around every generated application:
# org.tracegenerator.<appname>
ROOT_NAMESPACE = ("org", "tracegenerator")

# RANDOM_EXIT leaves the current package with probability 1 / EXIT_CHANCE
EXIT_CHANCE = 5

# Upper bounds enforced by the CLI (the engine itself only enforces minimums)
MAX_APP_COUNT = 100
MAX_CLASS_COUNT = 100
MAX_METHODS = 10
MAX_PACKAGE_DEPTH = 10
MAX_TRACE_DURATION = 10000
MAX_CALL_COUNT = 10000
MAX_CALL_DEPTH = 100
