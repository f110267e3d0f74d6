"""Rate limits for student-side write endpoints."""

from rest_framework.throttling import UserRateThrottle

class TaskSubmitThrottle(UserRateThrottle):
    """Per-student limit on submit/resubmit calls; rate is DEFAULT_THROTTLE_RATES["task_submit"]."""
    scope = "task_submit"
