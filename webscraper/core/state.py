from enum import Enum


class SchedulerState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    STOPPING = "stopping"
