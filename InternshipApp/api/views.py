"""REST API views for tasks, submissions, reviews and monitoring.

Views stay thin: they validate payload shape with serializers, build the
explicit Actor and delegate to domain services. Domain errors are DRF
exceptions and are rendered by DRF's default handler.
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiResponse,
    OpenApiParameter,
)

from InternshipApp.api.mixins import ActorMixin
from InternshipApp.api.throttles import TaskSubmitThrottle
from InternshipApp.core.exceptions import NotFoundError
from InternshipApp.core.permissions import IsAdmin, IsReviewer, IsStudent, IsSubmissionParticipant
from InternshipApp.domain.services import (
    monitoring_service,
    review_service,
    submission_service,
    task_service,
)
from InternshipApp.api.serializers import (
    ReviewSerializer,
    StudentTaskViewSerializer,
    SubmissionReadSerializer,
    SubmissionSummarySerializer,
    SubmitSerializer,
    TaskReadSerializer,
    TaskStatsSerializer,
    TaskWriteSerializer,
)

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden"),
    404: OpenApiResponse(description="Not Found"),
}

VALIDATION_RESPONSE = {
    422: OpenApiResponse(description="Semantic validation failed."),
}

STATE_RESPONSE = {
    409: OpenApiResponse(description="Operation not permitted in the current state."),
}


# ---------- Tasks ----------
@extend_schema_view(
    list=extend_schema(tags=["Tasks"], responses={200: TaskReadSerializer(many=True), **AUTH_RESPONSES}),
    retrieve=extend_schema(tags=["Tasks"], responses={200: TaskReadSerializer, **AUTH_RESPONSES}),
    create=extend_schema(
        tags=["Tasks"],
        request=TaskWriteSerializer,
        responses={201: TaskReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["mentor", "admin"]}},
    ),
    partial_update=extend_schema(
        tags=["Tasks"],
        request=TaskWriteSerializer,
        responses={200: TaskReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["mentor", "admin"]}},
    ),
    destroy=extend_schema(
        tags=["Tasks"],
        description="Delete a task. Blocked with 409 while submissions exist.",
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **STATE_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["mentor", "admin"]}},
    ),
)
class TaskViewSet(ActorMixin, viewsets.GenericViewSet):
    """Task registry plus the per-task student actions and monitoring stats."""
    permission_classes = [IsAuthenticated, IsReviewer]
    serializer_class = TaskReadSerializer

    def get_permissions(self) -> list:
        if self.action in ("start", "submit", "discard_draft"):
            return [IsAuthenticated(), IsStudent()]
        if self.action in ("retrieve", "student_view"):
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsReviewer()]

    def get_throttles(self):
        """Apply rate throttle only on submit."""
        if self.action == "submit":
            self.throttle_classes = [TaskSubmitThrottle]
        return super().get_throttles()

    def list(self, request: Request) -> Response:
        """List all tasks (mentor/admin)."""
        tasks = task_service.list_tasks(self.actor, search=request.query_params.get("search"))
        return Response(TaskReadSerializer(tasks, many=True).data)

    def retrieve(self, request: Request, pk: int | None = None) -> Response:
        """Retrieve a task; students only see tasks assigned to them."""
        task = task_service.get_task(pk)
        if self.actor.is_student:
            submission_service.ensure_assigned(task, self.actor.id)
        return Response(TaskReadSerializer(task).data)

    def create(self, request: Request) -> Response:
        """Create a task via the domain service."""
        ser = TaskWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        task = task_service.create_task(self.actor, **ser.validated_data)
        return Response(TaskReadSerializer(task).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: int | None = None) -> Response:
        """Partially update a task."""
        ser = TaskWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        task = task_service.update_task(self.actor, pk, **ser.validated_data)
        return Response(TaskReadSerializer(task_service.get_task(task.pk)).data)

    def destroy(self, request: Request, pk: int | None = None) -> Response:
        """Delete a task without submissions."""
        task_service.delete_task(self.actor, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Monitoring"], responses={200: TaskStatsSerializer, **AUTH_RESPONSES})
    @action(detail=True, methods=["get"], url_path="stats")
    def stats(self, request: Request, pk: int | None = None) -> Response:
        """Counts per state over the task's assignees."""
        stats = monitoring_service.get_task_stats(self.actor, pk)
        return Response(TaskStatsSerializer(stats).data)

    @extend_schema(
        tags=["Monitoring"],
        parameters=[OpenApiParameter("student_id", int, OpenApiParameter.PATH)],
        responses={200: StudentTaskViewSerializer, **AUTH_RESPONSES},
    )
    @action(detail=True, methods=["get"], url_path=r"students/(?P<student_id>\d+)")
    def student_view(self, request: Request, pk: int | None = None, student_id: int | None = None) -> Response:
        """Status, lateness and submission of one student for this task."""
        view = monitoring_service.get_student_task_view(self.actor, pk, int(student_id))
        return Response(StudentTaskViewSerializer(view).data)

    @extend_schema(
        tags=["Submissions"],
        request=None,
        responses={200: SubmissionReadSerializer, **AUTH_RESPONSES, **STATE_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    )
    @action(detail=True, methods=["post"], url_path="start")
    def start(self, request: Request, pk: int | None = None) -> Response:
        """Mark the task as in progress for the requesting student."""
        submission = submission_service.start(self.actor, pk, self.actor.id)
        return Response(SubmissionReadSerializer(submission).data)

    @extend_schema(
        tags=["Submissions"],
        request=SubmitSerializer,
        description=(
            "Submit or resubmit files for the task. Files are metadata returned by the "
            "upload service. Endpoint is rate-limited."
        ),
        responses={
            200: SubmissionReadSerializer,
            429: OpenApiResponse(description="Too many requests / throttled."),
            **AUTH_RESPONSES,
            **VALIDATION_RESPONSE,
            **STATE_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["student"], "ownership": "self"}},
    )
    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request: Request, pk: int | None = None) -> Response:
        """Submit (or resubmit after rejection) the requesting student's work."""
        ser = SubmitSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        submission = submission_service.submit(
            self.actor,
            pk,
            self.actor.id,
            files=ser.validated_data.get("files", []),
            note=ser.validated_data.get("note"),
        )
        return Response(SubmissionReadSerializer(submission).data)

    @extend_schema(
        tags=["Submissions"],
        responses={204: OpenApiResponse(description="Draft discarded"), **AUTH_RESPONSES, **STATE_RESPONSE},
    )
    @action(detail=True, methods=["delete"], url_path="draft")
    def discard_draft(self, request: Request, pk: int | None = None) -> Response:
        """Delete the requesting student's in-progress draft."""
        submission_service.discard_draft(self.actor, pk, self.actor.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------- Submissions ----------
@extend_schema(parameters=[OpenApiParameter("task_pk", int, OpenApiParameter.PATH)])
class SubmissionViewSet(ActorMixin, viewsets.GenericViewSet):
    """Monitoring list, submission detail, review and administrative delete."""
    permission_classes = [IsAuthenticated, IsReviewer]
    serializer_class = SubmissionReadSerializer

    def get_permissions(self) -> list:
        if self.action == "retrieve":
            return [IsAuthenticated(), IsSubmissionParticipant()]
        if self.action == "destroy":
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsReviewer()]

    def _get_submission(self, pk):
        submission = submission_service.get_submission(pk)
        if str(submission.task_id) != str(self.kwargs["task_pk"]):
            # ids from another task are reported as missing
            raise NotFoundError("Submission", pk)
        self.check_object_permissions(self.request, submission)
        return submission

    @extend_schema(tags=["Monitoring"], responses={200: SubmissionSummarySerializer(many=True), **AUTH_RESPONSES})
    def list(self, request: Request, task_pk: int | None = None) -> Response:
        """One row per assignee, ordered by student id."""
        summaries = monitoring_service.list_submissions(self.actor, task_pk)
        return Response(SubmissionSummarySerializer(summaries, many=True).data)

    @extend_schema(tags=["Submissions"], responses={200: SubmissionReadSerializer, **AUTH_RESPONSES})
    def retrieve(self, request: Request, task_pk: int | None = None, pk: int | None = None) -> Response:
        submission = self._get_submission(pk)
        return Response(SubmissionReadSerializer(submission).data)

    @extend_schema(
        tags=["Submissions"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    )
    def destroy(self, request: Request, task_pk: int | None = None, pk: int | None = None) -> Response:
        """Administrative delete of a ledger row in any state."""
        submission = self._get_submission(pk)
        submission_service.admin_delete_submission(self.actor, submission.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Reviews"],
        request=ReviewSerializer,
        responses={200: SubmissionReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE, **STATE_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["mentor", "admin"]}},
    )
    @action(detail=True, methods=["post"], url_path="review")
    def review(self, request: Request, task_pk: int | None = None, pk: int | None = None) -> Response:
        """Approve or reject a submitted task."""
        submission = self._get_submission(pk)
        ser = ReviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        reviewed = review_service.review(
            self.actor,
            submission.pk,
            ser.validated_data["decision"],
            score=ser.validated_data.get("score"),
            notes=ser.validated_data.get("notes", ""),
        )
        return Response(SubmissionReadSerializer(reviewed).data)


# ---------- Student task list ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Tasks"],
        parameters=[
            OpenApiParameter("status", str, OpenApiParameter.QUERY, enum=["todo", "in_progress", "submitted", "approved", "rejected"]),
            OpenApiParameter("search", str, OpenApiParameter.QUERY),
        ],
        responses={200: StudentTaskViewSerializer(many=True), **AUTH_RESPONSES, **VALIDATION_RESPONSE},
    ),
)
class MyTaskViewSet(ActorMixin, viewsets.GenericViewSet):
    """Tasks assigned to the requesting student."""
    permission_classes = [IsAuthenticated, IsStudent]
    serializer_class = StudentTaskViewSerializer

    def list(self, request: Request) -> Response:
        views = monitoring_service.list_assigned_tasks(
            self.actor,
            status=request.query_params.get("status"),
            search=request.query_params.get("search"),
        )
        return Response(StudentTaskViewSerializer(views, many=True).data)
