from fastapi import Request

from mentortrack.services.coordinator import MentorDashboard


def get_dashboard(request: Request) -> MentorDashboard:
    """The process-wide dashboard session created in the app lifespan."""
    return request.app.state.dashboard
