"""REST API views for registration, account approval, assessments, students and dashboards."""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from django.contrib.auth import get_user_model

from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiResponse,
    OpenApiParameter,
)

from RecitationReportApp.assessments.models import Assessment
from RecitationReportApp.api.mixins import ActorMixin, PaginationMixin
from RecitationReportApp.api.throttles import RegistrationRateThrottle
from RecitationReportApp.core.choices import AccessAction, UserRole
from RecitationReportApp.core.permissions import AccessDecisionPermission, actor_for
from RecitationReportApp.domain.services import account_service, assessment_service, stats_service
from RecitationReportApp.api.serializers import (
    RegistrationSerializer,
    AccountSerializer,
    AccountStatusSerializer,
    AccountFilterSerializer,
    AccountTokenObtainPairSerializer,
    AssessmentWriteSerializer,
    AssessmentReadSerializer,
    AssessmentListSerializer,
    AssessmentFilterSerializer,
    AdminStatsSerializer,
    TeacherStatsSerializer,
    StudentStatsSerializer,
    StudentReportSerializer,
)

User = get_user_model()

AUTH_RESPONSES = {
    401: OpenApiResponse(description="Authentication required."),
    403: OpenApiResponse(description="Forbidden"),
}

NOT_FOUND_RESPONSE = {
    404: OpenApiResponse(description="Not Found"),
}

VALIDATION_RESPONSE = {
    400: OpenApiResponse(description="Validation failed."),
}

ASSESSMENT_FILTERS = [
    OpenApiParameter("student", int, description="Only this student's assessments (teachers)."),
    OpenApiParameter("unit", str, description="Case-insensitive match on surah or track."),
    OpenApiParameter("date_from", str, description="Inclusive lower date bound (YYYY-MM-DD)."),
    OpenApiParameter("date_to", str, description="Inclusive upper date bound (YYYY-MM-DD)."),
]


# ---------- Auth ----------
@extend_schema(
    tags=["Auth"],
    request=RegistrationSerializer,
    responses={
        201: AccountSerializer,
        429: OpenApiResponse(description="Too many requests / throttled."),
        **VALIDATION_RESPONSE,
    },
    description="Register a student (default) or teacher account. New accounts wait for admin approval.",
)
class RegistrationView(APIView):
    """Public registration endpoint."""
    permission_classes = [AccessDecisionPermission]
    access_action = AccessAction.REGISTER
    authentication_classes: list[type] = []
    throttle_classes = [RegistrationRateThrottle]

    def post(self, request: Request) -> Response:
        """Create a pending account after validating the role's required fields."""
        ser = RegistrationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        if data.pop("role") == UserRole.TEACHER:
            user = account_service.register_teacher(data)
        else:
            user = account_service.register_student(data)
        return Response(AccountSerializer(user).data, status=status.HTTP_201_CREATED)


@extend_schema(tags=["Auth"])
class AccountTokenObtainPairView(TokenObtainPairView):
    """Email/password login returning a JWT pair with role and approval claims."""
    serializer_class = AccountTokenObtainPairSerializer


@extend_schema(
    tags=["Auth"],
    responses={200: AccountStatusSerializer, **AUTH_RESPONSES},
    description="The caller's own account; available while pending approval.",
)
class AccountStatusView(APIView):
    permission_classes = [AccessDecisionPermission]
    access_action = AccessAction.VIEW_OWN_STATUS

    def get(self, request: Request) -> Response:
        account = account_service.account_status(actor_for(request))
        return Response(AccountStatusSerializer(account).data)


# ---------- Admin ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Admin"],
        parameters=[
            OpenApiParameter("role", str, enum=UserRole.values),
            OpenApiParameter("approval_state", str),
        ],
        responses={200: AccountSerializer(many=True), **AUTH_RESPONSES, **VALIDATION_RESPONSE},
    ),
    destroy=extend_schema(
        tags=["Admin"],
        responses={
            204: OpenApiResponse(description="Deleted"),
            **AUTH_RESPONSES,
            **NOT_FOUND_RESPONSE,
            **VALIDATION_RESPONSE,
        },
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    approve=extend_schema(
        tags=["Admin"],
        request=None,
        responses={200: AccountSerializer, **AUTH_RESPONSES, **NOT_FOUND_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
    reject=extend_schema(
        tags=["Admin"],
        request=None,
        responses={200: AccountSerializer, **AUTH_RESPONSES, **NOT_FOUND_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["admin"]}},
    ),
)
class AccountViewSet(ActorMixin, PaginationMixin, viewsets.GenericViewSet):
    """Account review for admins: list, approve, reject, delete."""
    queryset = User.objects.none()
    permission_classes = [AccessDecisionPermission]
    serializer_class = AccountSerializer
    access_actions = {
        "list": AccessAction.LIST_ACCOUNTS,
        "destroy": AccessAction.DELETE_ACCOUNT,
        "approve": AccessAction.APPROVE_ACCOUNT,
        "reject": AccessAction.REJECT_ACCOUNT,
    }

    def list(self, request: Request) -> Response:
        """List accounts, newest first, optionally by role and approval state."""
        filters = AccountFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        accounts = account_service.list_accounts(self.actor, **filters.validated_data)
        return self.paginate_and_respond(accounts, AccountSerializer)

    def destroy(self, request: Request, pk: int | None = None) -> Response:
        """Delete an account with its profile and assessments."""
        account_service.delete_account(self.actor, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def approve(self, request: Request, pk: int | None = None) -> Response:
        """Approve a pending account."""
        account = account_service.approve_account(self.actor, pk)
        return Response(AccountSerializer(account).data)

    @action(detail=True, methods=["post"])
    def reject(self, request: Request, pk: int | None = None) -> Response:
        """Reject a pending account."""
        account = account_service.reject_account(self.actor, pk)
        return Response(AccountSerializer(account).data)


@extend_schema(tags=["Admin"], responses={200: AdminStatsSerializer, **AUTH_RESPONSES})
class AdminStatsView(APIView):
    """Aggregate counts for the admin dashboard."""
    permission_classes = [AccessDecisionPermission]
    access_action = AccessAction.VIEW_GLOBAL_STATS

    def get(self, request: Request) -> Response:
        return Response(AdminStatsSerializer(stats_service.admin_stats(actor_for(request))).data)


# ---------- Assessments ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Assessments"],
        parameters=ASSESSMENT_FILTERS,
        responses={200: AssessmentReadSerializer(many=True), **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["teacher", "student"], "ownership": "author-or-owner"}},
    ),
    retrieve=extend_schema(
        tags=["Assessments"],
        responses={200: AssessmentReadSerializer, **AUTH_RESPONSES, **NOT_FOUND_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["teacher", "student"], "ownership": "author-or-owner"}},
    ),
    create=extend_schema(
        tags=["Assessments"],
        request=AssessmentWriteSerializer,
        responses={201: AssessmentReadSerializer, **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        description="Record an assessment. Category and final scores are computed from the marks; "
                    "absent marks count as 0.",
        extensions={"x-permissions": {"required_roles": ["teacher"], "ownership": "author-on-create"}},
    ),
    destroy=extend_schema(
        tags=["Assessments"],
        responses={204: OpenApiResponse(description="Deleted"), **AUTH_RESPONSES, **NOT_FOUND_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["teacher"], "ownership": "author"}},
    ),
)
class AssessmentViewSet(ActorMixin, PaginationMixin, viewsets.GenericViewSet):
    """Record, list, read and delete assessments for the author or the assessed student."""
    queryset = Assessment.objects.none()
    permission_classes = [AccessDecisionPermission]

    def get_serializer_class(self):
        return AssessmentWriteSerializer if self.action == "create" else AssessmentReadSerializer

    def get_access_action(self, request: Request) -> AccessAction | None:
        is_student = getattr(request.user, "role", None) == UserRole.STUDENT
        return {
            "list": AccessAction.LIST_OWN_ASSESSMENTS if is_student else AccessAction.LIST_AUTHORED_ASSESSMENTS,
            "retrieve": AccessAction.READ_OWN_ASSESSMENT if is_student else AccessAction.READ_AUTHORED_ASSESSMENT,
            "create": AccessAction.CREATE_ASSESSMENT,
            "destroy": AccessAction.DELETE_ASSESSMENT,
        }.get(self.action)

    def list(self, request: Request) -> Response:
        """List visible assessments, newest date first."""
        filters = AssessmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        qs = assessment_service.list_assessments(
            self.actor,
            student_id=params.get("student"),
            unit=params.get("unit"),
            date_from=params.get("date_from"),
            date_to=params.get("date_to"),
        )
        return self.paginate_and_respond(qs, AssessmentReadSerializer)

    def create(self, request: Request) -> Response:
        """Create an assessment and return its scored representation."""
        ser = AssessmentWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        assessment = assessment_service.create_assessment(
            self.actor,
            student_id=data["student"],
            date=data["date"],
            surah=data["surah"],
            track=data["track"],
            note=data["note"],
            marks=ser.marks(),
        )
        assessment = assessment_service.get_assessment(self.actor, assessment.pk)
        return Response(AssessmentReadSerializer(assessment).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: int | None = None) -> Response:
        assessment = assessment_service.get_assessment(self.actor, pk)
        return Response(AssessmentReadSerializer(assessment).data)

    def destroy(self, request: Request, pk: int | None = None) -> Response:
        """Delete an assessment together with its category records."""
        assessment_service.delete_assessment(self.actor, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------- Students ----------
@extend_schema_view(
    list=extend_schema(
        tags=["Students"],
        responses={200: AccountSerializer(many=True), **AUTH_RESPONSES},
        extensions={"x-permissions": {"required_roles": ["teacher"]}},
    ),
)
class StudentViewSet(ActorMixin, PaginationMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Approved students a teacher can assess."""
    queryset = User.objects.none()
    permission_classes = [AccessDecisionPermission]
    serializer_class = AccountSerializer
    access_action = AccessAction.LIST_APPROVED_STUDENTS

    def list(self, request: Request, *args, **kwargs) -> Response:
        return self.paginate_and_respond(account_service.list_approved_students(self.actor), AccountSerializer)


@extend_schema_view(
    list=extend_schema(
        tags=["Students"],
        parameters=[p for p in ASSESSMENT_FILTERS if p.name != "student"],
        responses={200: AssessmentListSerializer(many=True), **AUTH_RESPONSES, **VALIDATION_RESPONSE},
        extensions={"x-permissions": {"required_roles": ["teacher"], "ownership": "author"}},
    ),
)
@extend_schema(parameters=[OpenApiParameter("student_pk", int, OpenApiParameter.PATH)])
class StudentAssessmentViewSet(ActorMixin, PaginationMixin, viewsets.GenericViewSet):
    """The requesting teacher's assessments of one student."""
    queryset = Assessment.objects.none()
    permission_classes = [AccessDecisionPermission]
    serializer_class = AssessmentListSerializer
    access_action = AccessAction.LIST_AUTHORED_ASSESSMENTS

    def list(self, request: Request, student_pk: int | None = None) -> Response:
        filters = AssessmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data
        qs = assessment_service.list_assessments(
            self.actor,
            student_id=student_pk,
            unit=params.get("unit"),
            date_from=params.get("date_from"),
            date_to=params.get("date_to"),
        )
        return self.paginate_and_respond(qs, AssessmentListSerializer)


# ---------- Dashboards ----------
@extend_schema(tags=["Dashboards"], responses={200: TeacherStatsSerializer, **AUTH_RESPONSES})
class TeacherStatsView(APIView):
    """Counts and recent assessments for the teacher dashboard."""
    permission_classes = [AccessDecisionPermission]
    access_action = AccessAction.VIEW_TEACHER_STATS

    def get(self, request: Request) -> Response:
        return Response(TeacherStatsSerializer(stats_service.teacher_stats(actor_for(request))).data)


@extend_schema(tags=["Dashboards"], responses={200: StudentStatsSerializer, **AUTH_RESPONSES})
class StudentStatsView(APIView):
    """Own count, average score and recent assessments for the student dashboard."""
    permission_classes = [AccessDecisionPermission]
    access_action = AccessAction.VIEW_OWN_STATS

    def get(self, request: Request) -> Response:
        return Response(StudentStatsSerializer(stats_service.student_stats(actor_for(request))).data)


@extend_schema(tags=["Dashboards"], responses={200: StudentReportSerializer, **AUTH_RESPONSES})
class StudentReportView(APIView):
    """Report card: category averages and a band for each assessment."""
    permission_classes = [AccessDecisionPermission]
    access_action = AccessAction.VIEW_OWN_REPORT

    def get(self, request: Request) -> Response:
        return Response(StudentReportSerializer(stats_service.student_report(actor_for(request))).data)
