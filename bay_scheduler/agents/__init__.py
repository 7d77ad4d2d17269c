from bay_scheduler.agents.scheduler_agent import SchedulerAgent

__all__ = ["SchedulerAgent"]
