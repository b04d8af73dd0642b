"""Serializers for the REST API.

Keep responses modest and role-aware: quiz answers never leave the server
for students, and students only see their own submissions.
"""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from accounts.models import Role, display_name, role_of
from activity.models import CalendarTask, Notification
from courses.models import Certificate, Course, CourseFeedback, Enrollment
from discussions.models import DiscussionReply, DiscussionTopic
from lessons.models import AssignmentSubmission, Lesson, LessonType, Question, Submission
from system.flags import KNOWN_FLAGS

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "name", "email", "role")

    def get_name(self, obj) -> str:
        return display_name(obj)

    def get_role(self, obj) -> str | None:
        return role_of(obj)


class AdminUserSerializer(UserSerializer):
    is_verified = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = ("id", "name", "email", "role", "is_active", "is_verified", "date_joined")

    def get_is_verified(self, obj) -> bool:
        return bool(getattr(getattr(obj, "profile", None), "is_verified", False))


class AdminUserUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    email = serializers.EmailField(required=False)
    role = serializers.ChoiceField(choices=Role.choices, required=False)

    def validate_email(self, value: str) -> str:
        email = value.strip().lower()
        clash = User.objects.filter(email__iexact=email).exclude(pk=self.instance.pk if self.instance else None)
        if clash.exists():
            raise serializers.ValidationError("Email already exists")
        return email

    def update(self, instance, validated_data):
        profile = instance.profile
        if "email" in validated_data:
            instance.email = validated_data["email"]
            instance.username = validated_data["email"]
            instance.save(update_fields=["email", "username"])
        profile_fields = []
        if "name" in validated_data:
            profile.full_name = validated_data["name"].strip()
            profile_fields.append("full_name")
        if "role" in validated_data:
            profile.role = validated_data["role"]
            profile_fields.append("role")
        if profile_fields:
            profile.save(update_fields=profile_fields)
        return instance


# Auth

class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    # Admin accounts are never self-registered
    role = serializers.ChoiceField(choices=[Role.STUDENT, Role.TEACHER], default=Role.STUDENT)

    def validate_email(self, value: str) -> str:
        email = value.strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("Email already exists")
        return email

    def validate(self, attrs):
        candidate = User(username=attrs["email"], email=attrs["email"])
        validate_password(attrs["password"], user=candidate)
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    remember_me = serializers.BooleanField(default=False)


class VerifyEmailSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)


# Courses and enrollments

class CourseSerializer(serializers.ModelSerializer):
    teacher = UserSerializer(source="owner", read_only=True)

    class Meta:
        model = Course
        fields = (
            "id",
            "title",
            "description",
            "thumbnail_url",
            "video_embed_url",
            "access_days",
            "teacher",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("teacher", "created_at", "updated_at")

    def validate_access_days(self, value: int) -> int:
        if value < 1:
            raise serializers.ValidationError("Access must last at least one day.")
        return value


class EnrollmentSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = Enrollment
        fields = ("id", "course", "course_title", "user", "enrolled_at", "expires_at", "is_active", "teacher_notes")
        read_only_fields = fields


class EnrollRequestSerializer(serializers.Serializer):
    """Empty body: enroll yourself. `email`/`emails`: instructor bulk enrollment."""

    email = serializers.EmailField(required=False)
    emails = serializers.ListField(child=serializers.EmailField(), required=False, allow_empty=False, max_length=500)

    def validate(self, attrs):
        emails = list(attrs.get("emails") or [])
        if attrs.get("email"):
            emails.append(attrs["email"])
        attrs["targets"] = emails
        return attrs


class ExtendEnrollmentSerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=3650)


class EnrollmentNoteSerializer(serializers.Serializer):
    note = serializers.CharField(allow_blank=True, max_length=5000)


# Lessons

class QuestionSerializer(serializers.ModelSerializer):
    """Full question (with the answer) for course managers."""

    class Meta:
        model = Question
        fields = ("id", "order", "text", "options", "correct_answer")

    def validate_options(self, value):
        if not isinstance(value, list) or len(value) < 2 or not all(isinstance(o, str) and o.strip() for o in value):
            raise serializers.ValidationError("Provide at least two non-empty options.")
        return value

    def validate(self, attrs):
        options = attrs.get("options") or []
        if attrs.get("correct_answer") not in options:
            raise serializers.ValidationError({"correct_answer": "The correct answer must be one of the options."})
        return attrs


class QuizQuestionSerializer(serializers.ModelSerializer):
    """Question as shown to a student taking the quiz."""

    class Meta:
        model = Question
        fields = ("id", "order", "text", "options")


class LessonSerializer(serializers.ModelSerializer):
    questions = QuestionSerializer(many=True, required=False)

    class Meta:
        model = Lesson
        fields = ("id", "course", "title", "type", "content_url", "position", "due_date", "target_students", "questions")
        read_only_fields = ("course",)

    def validate_target_students(self, value):
        if value in (None, ""):
            return None
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of user ids.")
        ids = []
        for item in value:
            # bool is an int subclass; reject it explicitly
            if isinstance(item, bool) or not isinstance(item, int) or item <= 0:
                raise serializers.ValidationError("User ids must be positive integers.")
            ids.append(item)
        unique = sorted(set(ids))
        found = set(User.objects.filter(pk__in=unique).values_list("id", flat=True))
        missing = [i for i in unique if i not in found]
        if missing:
            raise serializers.ValidationError(f"Unknown user ids: {missing}")
        return unique or None

    def validate(self, attrs):
        lesson_type = attrs.get("type", getattr(self.instance, "type", None))
        if attrs.get("target_students") and lesson_type != LessonType.ASSIGNMENT:
            raise serializers.ValidationError({"target_students": "Only assignment lessons can target students."})
        if attrs.get("questions") and lesson_type != LessonType.QUIZ:
            raise serializers.ValidationError({"questions": "Only quiz lessons have questions."})
        if lesson_type != LessonType.ASSIGNMENT and getattr(self.instance, "target_students", None):
            # Changing type away from assignment drops the stored allow-list
            attrs["target_students"] = None
        return attrs

    def create(self, validated_data):
        questions = validated_data.pop("questions", [])
        lesson = Lesson.objects.create(**validated_data)
        self._write_questions(lesson, questions)
        return lesson

    def update(self, instance, validated_data):
        questions = validated_data.pop("questions", None)
        instance = super().update(instance, validated_data)
        if questions is not None:
            instance.questions.all().delete()
            self._write_questions(instance, questions)
        return instance

    @staticmethod
    def _write_questions(lesson, questions):
        Question.objects.bulk_create(
            [
                Question(lesson=lesson, order=q.get("order") or i, text=q["text"], options=q["options"], correct_answer=q["correct_answer"])
                for i, q in enumerate(questions, start=1)
            ]
        )


class SubmissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Submission
        fields = ("id", "score", "completed_at")


class AssignmentSubmissionSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    file_url = serializers.SerializerMethodField()

    class Meta:
        model = AssignmentSubmission
        fields = ("id", "lesson", "user", "file_url", "grade", "feedback", "submitted_at", "graded_at")
        read_only_fields = fields

    def get_file_url(self, obj) -> str:
        if not obj.file:
            return ""
        request = self.context.get("request")
        return request.build_absolute_uri(obj.file.url) if request else obj.file.url


class OwnAssignmentSubmissionSerializer(AssignmentSubmissionSerializer):
    class Meta(AssignmentSubmissionSerializer.Meta):
        fields = ("id", "file_url", "grade", "feedback", "submitted_at", "graded_at")
        read_only_fields = fields


class LessonDetailSerializer(serializers.ModelSerializer):
    """Lesson inside the course player, with the caller's own progress.

    Expects `my_submissions` / `my_assignment_submissions` prefetched.
    """

    submissions = serializers.SerializerMethodField()
    assignment_submission = serializers.SerializerMethodField()

    class Meta:
        model = Lesson
        fields = ("id", "title", "type", "content_url", "position", "due_date", "submissions", "assignment_submission")

    def get_submissions(self, obj):
        return SubmissionSerializer(getattr(obj, "my_submissions", []), many=True).data

    def get_assignment_submission(self, obj):
        own = getattr(obj, "my_assignment_submissions", [])
        if not own:
            return None
        return OwnAssignmentSubmissionSerializer(own[0], context=self.context).data


class QuizSubmitSerializer(serializers.Serializer):
    answers = serializers.DictField(child=serializers.CharField(allow_blank=True), allow_empty=True)


class AssignmentUploadSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        if value.size > settings.ASSIGNMENT_UPLOAD_MAX_BYTES:
            raise serializers.ValidationError("File is too large.")
        return value


class GradeSerializer(serializers.Serializer):
    grade = serializers.IntegerField(min_value=0, max_value=100)
    feedback = serializers.CharField(allow_blank=True, required=False, default="")


# Feedback and certificates

class CourseFeedbackSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = CourseFeedback
        fields = ("id", "course", "user", "rating", "comment", "created_at")
        read_only_fields = ("course", "user", "created_at")


class CertificateSerializer(serializers.ModelSerializer):
    course_id = serializers.IntegerField(read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)
    student_name = serializers.SerializerMethodField()

    class Meta:
        model = Certificate
        fields = ("unique_id", "course_id", "course_title", "student_name", "issued_at")

    def get_student_name(self, obj) -> str:
        return display_name(obj.user)


# Discussions

class DiscussionReplySerializer(serializers.ModelSerializer):
    author = UserSerializer(source="user", read_only=True)

    class Meta:
        model = DiscussionReply
        fields = ("id", "topic", "author", "content", "created_at")
        read_only_fields = ("topic", "author", "created_at")


class DiscussionTopicSerializer(serializers.ModelSerializer):
    author = UserSerializer(source="user", read_only=True)
    reply_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = DiscussionTopic
        fields = ("id", "course", "title", "content", "author", "reply_count", "created_at")
        read_only_fields = ("course", "author", "reply_count", "created_at")


class DiscussionTopicDetailSerializer(DiscussionTopicSerializer):
    replies = DiscussionReplySerializer(many=True, read_only=True)

    class Meta(DiscussionTopicSerializer.Meta):
        fields = DiscussionTopicSerializer.Meta.fields + ("replies",)


# Notifications and settings

class TeacherTopicSerializer(serializers.ModelSerializer):
    """Topic row for the instructor's cross-course discussion overview."""

    course_title = serializers.CharField(source="course.title", read_only=True)
    author = serializers.SerializerMethodField()
    reply_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = DiscussionTopic
        fields = ("id", "course", "course_title", "title", "author", "reply_count", "created_at")
        read_only_fields = fields

    def get_author(self, obj) -> str:
        return display_name(obj.user)


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ("id", "type", "message", "link", "course", "is_read", "created_at")
        read_only_fields = fields


class CalendarTaskSerializer(serializers.ModelSerializer):
    class Meta:
        model = CalendarTask
        fields = ("id", "title", "date", "description", "created_at")
        read_only_fields = ("id", "created_at")

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value


class FeatureFlagsUpdateSerializer(serializers.Serializer):
    """A partial `{FLAG: bool}` map; only known flags, only real booleans."""

    def to_internal_value(self, data):
        if not isinstance(data, dict) or not data:
            raise serializers.ValidationError({"detail": "Expected a non-empty object of flags."})
        errors = {}
        for key, value in data.items():
            if key not in KNOWN_FLAGS:
                errors[key] = "Unknown setting."
            elif not isinstance(value, bool):
                errors[key] = "Must be true or false."
        if errors:
            raise serializers.ValidationError(errors)
        return dict(data)
