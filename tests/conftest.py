"""
Shared pytest fixtures for glazeup tests.

FakeGlazeClient is an in-memory stand-in for a GlazeWM IPC connection. It
keeps a live container tree and applies the commands glazeup issues
(focus, tiling direction, move, resize, close, fullscreen) closely enough
for the phases to be exercised end to end without a window manager.
"""

import itertools
import re
from collections import deque
from copy import deepcopy

import pytest
from pubsub import pub

from glazeup import topics
from glazeup.application_launcher import ApplicationLauncher, StartAppsResolver
from glazeup.client import CommandError, Subscription
from glazeup.objects import LiveContainer
from glazeup.settings import Settings

MIN_SIZE = 0.01

_RESIZE = re.compile(r"^resize --(width|height) ([+-])(\d+)%$")


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a window manager")
    config.addinivalue_line("markers", "integration: phases run against the fake window manager")


class FakeClock:
    """Monotonic clock advanced by the fake client while it waits."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeGlazeClient:
    """In-memory GlazeWM with the query/command/subscribe surface of GlazeClient."""

    def __init__(self, clock=None):
        self.workspaces = []
        self.commands = []
        self.focused_workspace = None
        self.focused_id = None
        self.fullscreen_ids = []
        self.stubborn_ids = set()
        self.rejected_commands = set()
        self.pending_windows = deque()
        self.clock = clock or FakeClock()
        self.connected = True
        self._events = deque()
        self._subscriptions = {}
        self._ids = itertools.count(1)

    # Building the initial state

    def add_workspace(self, name, tiling_direction="horizontal", focus=False):
        workspace = LiveContainer(
            type="workspace",
            id=f"ws-{name}",
            name=name,
            tiling_direction=tiling_direction,
        )
        self.workspaces.append(workspace)
        if focus or self.focused_workspace is None:
            self.focused_workspace = name
        return workspace

    def add_window(self, workspace_name, title="window", size=None, parent=None, process_name="app"):
        workspace = self._workspace(workspace_name) or self.add_workspace(workspace_name)
        parent = parent or workspace
        window = LiveContainer(
            type="window",
            id=f"win-{next(self._ids)}",
            title=title,
            process_name=process_name,
        )
        parent.children.append(window)
        if size is None:
            self._equalize(parent)
        else:
            window.tiling_size = size
        return window

    def add_split(self, workspace_name, tiling_direction="vertical", size=None):
        workspace = self._workspace(workspace_name) or self.add_workspace(workspace_name)
        split = LiveContainer(
            type="split",
            id=f"split-{next(self._ids)}",
            tiling_direction=tiling_direction,
            tiling_size=size or 0.0,
        )
        workspace.children.append(split)
        return split

    def queue_window(self, title="window", process_name="app"):
        """Open a window in the focused workspace on the next pump()."""
        self.pending_windows.append((self.focused_workspace, title, process_name))

    # Client surface

    def connect(self):
        self.connected = True

    def close(self):
        self.connected = False

    def query_workspaces(self):
        workspaces = deepcopy(self.workspaces)
        for workspace in workspaces:
            workspace.has_focus = workspace.name == self.focused_workspace
        return workspaces

    def query_windows(self):
        windows = []
        for workspace in self.workspaces:
            windows.extend(deepcopy(self._windows(workspace)))
        return windows

    def run_command(self, command, subject_id=None):
        self.commands.append((command, subject_id))
        if command in self.rejected_commands:
            raise CommandError(command, "rejected by fake")

        if command.startswith("focus --workspace "):
            self._focus_workspace(command[len("focus --workspace "):])
        elif command.startswith("focus --container-id "):
            self._focus_container(command[len("focus --container-id "):])
        elif command == "toggle-tiling-direction":
            self._toggle_direction(subject_id or self.focused_id)
        elif command.startswith("set-tiling-direction "):
            self._set_direction(subject_id or self.focused_id, command.split()[-1])
        elif command == "move --direction left":
            self._move_left(subject_id or self.focused_id)
        elif command == "close":
            self._close(subject_id or self.focused_id)
        elif command == "toggle-fullscreen":
            self.fullscreen_ids.append(subject_id or self.focused_id)
        else:
            match = _RESIZE.match(command)
            if match is None:
                raise CommandError(command, "unknown command")
            delta = int(match.group(3)) / 100
            self._resize(subject_id or self.focused_id, delta if match.group(2) == "+" else -delta)
        return None

    def subscribe(self, events):
        subscription = Subscription(self, f"sub-{next(self._ids)}", events)
        self._subscriptions[subscription.subscription_id] = subscription
        return subscription

    def _unsubscribe(self, subscription):
        self._subscriptions.pop(subscription.subscription_id, None)

    def pump(self, timeout=0.0):
        """Open one pending window and publish its event, or let time pass."""
        if self.pending_windows:
            name, title, process_name = self.pending_windows.popleft()
            window = self.add_window(name, title, process_name=process_name)
            self._events.append({"type": "window_managed", "managedWindow": window.to_dict()})
        elif timeout > 0:
            self.clock.advance(timeout)

        published = 0
        while self._events:
            data = self._events.popleft()
            subscribed = any(
                data["type"] in sub.events for sub in self._subscriptions.values()
            )
            if subscribed:
                pub.sendMessage(topics.WM_EVENT_TOPICS[data["type"]], data=data)
                published += 1
        return published

    # Lookups

    def _workspace(self, name):
        for workspace in self.workspaces:
            if workspace.name == name:
                return workspace
        return None

    def _windows(self, node):
        windows = []
        for child in node.children:
            if child.type == "window":
                windows.append(child)
            else:
                windows.extend(self._windows(child))
        return windows

    def _locate(self, container_id):
        """Return (workspace, parent, node) for a container id."""
        for workspace in self.workspaces:
            if workspace.id == container_id:
                return workspace, None, workspace
            found = self._locate_in(workspace, container_id)
            if found is not None:
                return (workspace,) + found
        raise CommandError(f"id {container_id}", "no container with that id")

    def _locate_in(self, parent, container_id):
        for child in parent.children:
            if child.id == container_id:
                return parent, child
            found = self._locate_in(child, container_id)
            if found is not None:
                return found
        return None

    def window(self, title):
        for workspace in self.workspaces:
            for window in self._windows(workspace):
                if window.title == title:
                    return window
        raise KeyError(title)

    def command_names(self):
        return [command for command, _ in self.commands]

    # Tree edits

    def _equalize(self, parent):
        for child in parent.children:
            child.tiling_size = 1.0 / len(parent.children)

    def _renormalize(self, parent):
        total = sum(child.tiling_size for child in parent.children)
        if total <= 0:
            self._equalize(parent)
            return
        for child in parent.children:
            child.tiling_size = child.tiling_size / total

    def _focus_workspace(self, name):
        previous = self._workspace(self.focused_workspace)
        if self._workspace(name) is None:
            self.add_workspace(name)
        self.focused_workspace = name
        self.focused_id = None
        if previous is not None and previous.name != name and not previous.children:
            self.workspaces.remove(previous)

    def _focus_container(self, container_id):
        workspace, _, node = self._locate(container_id)
        self._focus_workspace(workspace.name)
        self.focused_id = node.id

    def _toggle_direction(self, container_id):
        workspace, parent, node = self._locate(container_id)
        target = node if node.type != "window" else parent
        target.tiling_direction = "vertical" if target.tiling_direction == "horizontal" else "horizontal"

    def _set_direction(self, container_id, direction):
        workspace, parent, node = self._locate(container_id)
        if node.type != "window":
            node.tiling_direction = direction
            return
        if parent.tiling_direction == direction:
            return
        if parent.type == "split" and len(parent.children) == 1:
            parent.tiling_direction = direction
            return
        # Wrap the window in a new split that takes its place and size
        split = LiveContainer(
            type="split",
            id=f"split-{next(self._ids)}",
            tiling_direction=direction,
            tiling_size=node.tiling_size,
        )
        index = parent.children.index(node)
        parent.children[index] = split
        node.tiling_size = 1.0
        split.children.append(node)

    def _move_left(self, container_id):
        workspace, parent, node = self._locate(container_id)
        index = parent.children.index(node)
        if index == 0:
            return
        neighbour = parent.children[index - 1]
        if neighbour.type == "split":
            parent.children.remove(node)
            neighbour.children.append(node)
            self._equalize(neighbour)
            self._renormalize(parent)
            self._flatten(parent)
        else:
            parent.children[index - 1], parent.children[index] = node, neighbour

    def _flatten(self, parent):
        """Replace single-child splits with their child."""
        for i, child in enumerate(list(parent.children)):
            if child.type == "split" and len(child.children) == 1:
                only = child.children[0]
                only.tiling_size = child.tiling_size
                parent.children[i] = only

    def _close(self, container_id):
        workspace, parent, node = self._locate(container_id)
        if node.id in self.stubborn_ids and workspace.name != self.focused_workspace:
            return
        parent.children.remove(node)
        if parent.type == "split" and not parent.children:
            workspace_parent = self._locate(parent.id)[1]
            workspace_parent.children.remove(parent)
            parent = workspace_parent
        if parent.children:
            self._renormalize(parent)
            self._flatten(parent)
        if not workspace.children and workspace.name != self.focused_workspace:
            self.workspaces.remove(workspace)

    def _resize(self, container_id, delta):
        workspace, parent, node = self._locate(container_id)
        siblings = [child for child in parent.children if child is not node]
        if not siblings:
            return
        new_size = min(1.0 - MIN_SIZE * len(siblings), max(MIN_SIZE, node.tiling_size + delta))
        rest = sum(child.tiling_size for child in siblings)
        for child in siblings:
            child.tiling_size = child.tiling_size * (1.0 - new_size) / rest
        node.tiling_size = new_size


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_wm(clock):
    """Fake GlazeWM with one focused, empty workspace "1"."""
    wm = FakeGlazeClient(clock)
    wm.add_workspace("1", focus=True)
    return wm


@pytest.fixture
def settings():
    """Settings with every delay disabled."""
    return Settings(
        connect_delay=0,
        layout_delay=0,
        focus_delay=0,
        close_delay=0,
        restore_delay=0,
        open_delay=0,
        window_timeout=5.0,
    )


@pytest.fixture
def log():
    """Log collector usable as a log callback."""

    class Log(list):
        def __call__(self, msg):
            self.append(msg)

        def contains(self, text):
            return any(text in line for line in self)

    return Log()


@pytest.fixture
def no_sleep():
    slept = []
    return slept.append


@pytest.fixture
def fake_launcher(fake_wm, log):
    """Launcher whose processes open windows in the fake window manager."""
    spawned = []

    def spawn(argv):
        spawned.append(argv)
        fake_wm.queue_window(title=argv[0])

    launcher = ApplicationLauncher(StartAppsResolver(enabled=False), log, spawn=spawn)
    launcher.spawned = spawned
    return launcher
