"""
Event Topics for glazeup

All pub/sub topics are defined here for easy discovery and documentation.
Topic naming convention: <category>.<action>

Window manager events are published by GlazeClient when GlazeWM pushes a
subscribed event. Phase events are published by StartupRunner.
"""

# Window manager life-cycle events (payload: data=<event body dict>)
WINDOW_MANAGED = "wm.window_managed"
"""Published when GlazeWM starts managing a new window."""

WINDOW_UNMANAGED = "wm.window_unmanaged"
"""Published when GlazeWM stops managing a window (closed or ignored)."""

WORKSPACE_UPDATED = "wm.workspace_updated"
"""Published when a workspace's properties change."""

# Client connection events
CLIENT_CONNECTED = "client.connected"
"""Published after the IPC connection is established. Params: url"""

CLIENT_DISCONNECTED = "client.disconnected"
"""Published after the IPC connection is closed. Params: url"""

# Phase events
PHASE_STARTED = "phase.started"
"""Published before a startup phase runs. Params: phase"""

PHASE_FINISHED = "phase.finished"
"""Published after a startup phase completes. Params: phase, result"""

# GlazeWM event name -> topic
WM_EVENT_TOPICS = {
    "window_managed": WINDOW_MANAGED,
    "window_unmanaged": WINDOW_UNMANAGED,
    "workspace_updated": WORKSPACE_UPDATED,
}
