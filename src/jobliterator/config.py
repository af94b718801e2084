"""
Constants for jobliterator.

Defines ANSI codes for output formatting, the label that ties a Pod to its
Job, the Pod phases that count as finished, and CLI defaults.
"""

# ANSI escape sequences for terminal output
BOLD = "\033[1m"   # Start bold
SGR0 = "\033[0m"   # Reset (end bold)

# Label the Job controller sets on every Pod it creates.
JOB_NAME_LABEL = "job-name"

# Pod phases after which no further transition happens. Anything else is in flight.
TERMINAL_PHASES = frozenset({"Succeeded", "Failed"})

DEFAULT_DAYS = 7
DEFAULT_KUBECONFIG = "./config"

# Seconds before a single kubectl call is abandoned.
KUBECTL_TIMEOUT = 60

# Mounted into every pod that runs with a service account.
SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"
SERVICE_ACCOUNT_TOKEN = f"{SERVICE_ACCOUNT_DIR}/token"
SERVICE_ACCOUNT_CA = f"{SERVICE_ACCOUNT_DIR}/ca.crt"

ENV_PREFIX = "JOBLITERATOR"
