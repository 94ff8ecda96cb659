"""Serializers for registration, accounts, assessments with their rubric marks, and dashboards."""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from RecitationReportApp.assessments.models import CATEGORY_MODELS, Assessment
from RecitationReportApp.core.choices import ApprovalState, ScoreBand, UserRole
from RecitationReportApp.core.validators import validate_phone_number, validate_registration_number
from RecitationReportApp.domain import scoring
from RecitationReportApp.users.models import StudentProfile

User = get_user_model()

PROFILE_FIELDS = ["registration_number", "class_name", "track", "guardian_name", "phone_number", "address"]


class RegistrationSerializer(serializers.Serializer):
    """Public sign-up; students must also supply their profile details."""
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, help_text="Account password (write-only).")
    role = serializers.ChoiceField(
        choices=[UserRole.STUDENT, UserRole.TEACHER],
        default=UserRole.STUDENT,
        help_text="STUDENT (default) or TEACHER; both start pending approval.",
    )
    registration_number = serializers.CharField(
        max_length=32, required=False, validators=[validate_registration_number],
    )
    class_name = serializers.CharField(max_length=64, required=False)
    track = serializers.CharField(max_length=64, required=False)
    guardian_name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.CharField(max_length=20, required=False, validators=[validate_phone_number])
    address = serializers.CharField(required=False)

    def validate(self, data):
        if data["role"] == UserRole.STUDENT:
            missing = {field: "This field is required." for field in PROFILE_FIELDS if not data.get(field)}
            if missing:
                raise serializers.ValidationError(missing)
        return data


class StudentProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = StudentProfile
        fields = PROFILE_FIELDS


class AccountSerializer(serializers.ModelSerializer):
    """Safe representation of an account, with the student profile when present."""
    student_profile = StudentProfileSerializer(read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "approval_state", "date_joined", "student_profile"]


class AccountSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email"]


class AccountStatusSerializer(serializers.ModelSerializer):
    """The caller's own account and whether it may use the system yet."""
    is_approved = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "approval_state", "is_approved"]

    def get_is_approved(self, obj) -> bool:
        return obj.is_approved


def _marks_serializer(category: str, model) -> type[serializers.Serializer]:
    """Write serializer for one category: every criterion optional, 0..100."""
    fields = {
        name: serializers.FloatField(min_value=0, max_value=100, required=False)
        for name in scoring.CRITERION_WEIGHTS[category]
    }
    name = f"{model.__name__.replace('Assessment', '')}MarksSerializer"
    return type(name, (serializers.Serializer,), fields)


def _category_read_serializer(model) -> type[serializers.ModelSerializer]:
    meta = type("Meta", (), {"model": model, "fields": [*model.criteria(), "score"]})
    return type(f"{model.__name__}ReadSerializer", (serializers.ModelSerializer,), {"Meta": meta})


MARKS_SERIALIZERS = {key: _marks_serializer(key, model) for key, model in CATEGORY_MODELS.items()}
CATEGORY_READ_SERIALIZERS = {key: _category_read_serializer(model) for key, model in CATEGORY_MODELS.items()}


class AssessmentWriteSerializer(serializers.Serializer):
    """Input for recording an assessment. Scores are never accepted from the caller."""
    student = serializers.IntegerField(help_text="Id of an approved student account.")
    date = serializers.DateField()
    surah = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    track = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    note = serializers.CharField(required=False, allow_blank=True, default="")
    pronunciation = MARKS_SERIALIZERS[scoring.PRONUNCIATION](required=False)
    recitation_rules = MARKS_SERIALIZERS[scoring.RECITATION_RULES](required=False)
    rhythm = MARKS_SERIALIZERS[scoring.RHYTHM](required=False)
    voice = MARKS_SERIALIZERS[scoring.VOICE](required=False)
    conduct = MARKS_SERIALIZERS[scoring.CONDUCT](required=False)

    def marks(self) -> dict[str, dict[str, float]]:
        return {key: dict(self.validated_data.get(key) or {}) for key in scoring.CATEGORIES}


class AssessmentListSerializer(serializers.ModelSerializer):
    student = AccountSummarySerializer(read_only=True)
    teacher = AccountSummarySerializer(read_only=True)

    class Meta:
        model = Assessment
        fields = ["id", "date", "surah", "track", "final_score", "student", "teacher", "created_at"]


class AssessmentReadSerializer(AssessmentListSerializer):
    """Full assessment with every category's marks and score."""
    pronunciation = CATEGORY_READ_SERIALIZERS[scoring.PRONUNCIATION](read_only=True)
    recitation_rules = CATEGORY_READ_SERIALIZERS[scoring.RECITATION_RULES](read_only=True)
    rhythm = CATEGORY_READ_SERIALIZERS[scoring.RHYTHM](read_only=True)
    voice = CATEGORY_READ_SERIALIZERS[scoring.VOICE](read_only=True)
    conduct = CATEGORY_READ_SERIALIZERS[scoring.CONDUCT](read_only=True)
    band = serializers.SerializerMethodField()

    class Meta(AssessmentListSerializer.Meta):
        fields = AssessmentListSerializer.Meta.fields + [
            "note", "updated_at", "band", *scoring.CATEGORIES,
        ]

    def get_band(self, obj) -> str:
        return scoring.score_band(obj.final_score)


class AdminStatsSerializer(serializers.Serializer):
    total_users = serializers.IntegerField()
    pending_approvals = serializers.IntegerField()
    total_students = serializers.IntegerField()
    total_teachers = serializers.IntegerField()
    total_assessments = serializers.IntegerField()


class TeacherStatsSerializer(serializers.Serializer):
    total_assessments = serializers.IntegerField()
    total_students = serializers.IntegerField()
    recent_assessments = AssessmentListSerializer(many=True)


class StudentStatsSerializer(serializers.Serializer):
    total_assessments = serializers.IntegerField()
    average_score = serializers.FloatField()
    recent_assessments = AssessmentListSerializer(many=True)


class ReportAveragesSerializer(serializers.Serializer):
    final = serializers.FloatField()
    pronunciation = serializers.FloatField()
    recitation_rules = serializers.FloatField()
    rhythm = serializers.FloatField()
    voice = serializers.FloatField()
    conduct = serializers.FloatField()


class ReportEntrySerializer(serializers.Serializer):
    assessment = AssessmentReadSerializer()
    band = serializers.ChoiceField(choices=ScoreBand.choices)


class StudentReportSerializer(serializers.Serializer):
    total_assessments = serializers.IntegerField()
    averages = ReportAveragesSerializer()
    assessments = ReportEntrySerializer(many=True)


class AccountTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT pair whose access token also carries the account's role and approval state."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        token["approval_state"] = user.approval_state
        token["name"] = user.name
        return token

    def validate(self, attrs):
        attrs[self.username_field] = attrs[self.username_field].strip().lower()
        return super().validate(attrs)


class AssessmentFilterSerializer(serializers.Serializer):
    """Query parameters accepted by assessment listings."""
    student = serializers.IntegerField(required=False, min_value=1)
    unit = serializers.CharField(required=False, allow_blank=True)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, data):
        if data.get("date_from") and data.get("date_to") and data["date_from"] > data["date_to"]:
            raise serializers.ValidationError({"date_to": "Must not be earlier than date_from."})
        return data


class AccountFilterSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    approval_state = serializers.ChoiceField(choices=ApprovalState.choices, required=False)
