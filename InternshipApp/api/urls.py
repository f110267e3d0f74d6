from django.urls import path, include
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from InternshipApp.api.views import (
    TaskViewSet,
    SubmissionViewSet,
    MyTaskViewSet,
)

router = routers.SimpleRouter()
router.register(r"tasks", TaskViewSet, basename="task")
router.register(r"me/tasks", MyTaskViewSet, basename="my-tasks")

tasks_router = routers.NestedSimpleRouter(router, r"tasks", lookup="task")
tasks_router.register(r"submissions", SubmissionViewSet, basename="task-submissions")

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("", include(router.urls)),
    path("", include(tasks_router.urls)),
]
