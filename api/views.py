"""REST API viewsets and endpoints for courses, lessons and their activity.

Course-scoped routes go through one gate (`HasCourseAccess`) and one
management predicate (`CanManageCourse`); neither is re-implemented here.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Prefetch
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.models import Role
from activity.models import CalendarTask, Notification
from courses import enrollment as lifecycle
from courses.access import is_admin, require_manager
from courses.models import Certificate, Course, CourseFeedback, Enrollment
from discussions.live import broadcast
from discussions.models import DiscussionTopic
from lessons.gradebook import build_gradebook
from lessons.models import GRADABLE_TYPES, AssignmentSubmission, Lesson, LessonType, Submission
from lessons.progress import compute_progress, student_dashboard
from lessons.utils import grade_assignment, mark_complete, record_quiz_submission, submit_assignment
from system.flags import ENABLE_CERTIFICATES, ENABLE_STUDENT_UPLOADS, flags_for
from .exceptions import FeatureDisabled, Forbidden, NotFound, ValidationFailure
from .permissions import CanManageCourse, HasCourseAccess, IsInstructor
from .serializers import (
    AssignmentSubmissionSerializer,
    AssignmentUploadSerializer,
    CalendarTaskSerializer,
    CertificateSerializer,
    CourseFeedbackSerializer,
    CourseSerializer,
    DiscussionReplySerializer,
    DiscussionTopicDetailSerializer,
    DiscussionTopicSerializer,
    EnrollmentNoteSerializer,
    EnrollmentSerializer,
    EnrollRequestSerializer,
    GradeSerializer,
    LessonDetailSerializer,
    LessonSerializer,
    NotificationSerializer,
    OwnAssignmentSubmissionSerializer,
    QuizQuestionSerializer,
    QuizSubmitSerializer,
    SubmissionSerializer,
    TeacherTopicSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def _enrollment_summary(enrollment: Enrollment | None) -> dict | None:
    if enrollment is None:
        return None
    return {
        "id": enrollment.pk,
        "course_id": enrollment.course_id,
        "enrolled_at": enrollment.enrolled_at,
        "expires_at": enrollment.expires_at,
        "is_active": enrollment.is_active,
    }


class CourseViewSet(viewsets.ModelViewSet):
    queryset = Course.objects.select_related("owner__profile").all()
    serializer_class = CourseSerializer
    search_fields = ["title", "description", "owner__profile__full_name"]
    ordering_fields = ["created_at", "updated_at", "title"]

    def get_permissions(self):
        if self.action == "list":
            return [AllowAny()]
        if self.action == "create":
            return [IsAuthenticated(), IsInstructor()]
        if self.action in ("update", "partial_update", "destroy", "gradebook", "lessons"):
            return [IsAuthenticated(), CanManageCourse()]
        if self.action == "enroll":
            return [IsAuthenticated()]
        return [IsAuthenticated(), HasCourseAccess()]

    def perform_create(self, serializer):
        course = serializer.save(owner=self.request.user)
        logger.info("User %s created course %s", self.request.user.pk, course.pk)

    def perform_destroy(self, instance):
        logger.info("User %s deleted course %s", self.request.user.pk, instance.pk)
        instance.delete()

    def retrieve(self, request, *args, **kwargs):
        course = self.get_object()
        access = request.course_access
        lessons = course.lessons.order_by("position", "id").prefetch_related(
            Prefetch("submissions", queryset=Submission.objects.filter(user=request.user), to_attr="my_submissions"),
            Prefetch(
                "assignment_submissions",
                queryset=AssignmentSubmission.objects.filter(user=request.user),
                to_attr="my_assignment_submissions",
            ),
        )
        if not access.manager:
            lessons = [lesson for lesson in lessons if lesson.is_visible_to(request.user)]
        progress = compute_progress(request.user, course)
        data = CourseSerializer(course, context={"request": request}).data
        data.update(
            {
                "lessons": LessonDetailSerializer(lessons, many=True, context={"request": request}).data,
                "enrollment": _enrollment_summary(access.enrollment),
                "is_manager": access.manager,
                "progress": {
                    "total_lessons": progress.total_lessons,
                    "completed_lessons": progress.completed_lessons,
                    "percentage": progress.percentage,
                    "is_complete": progress.is_complete,
                },
            }
        )
        return Response(data)

    @action(detail=True, methods=["post"])
    def enroll(self, request, pk=None):
        course = self.get_object()
        serializer = EnrollRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        targets = serializer.validated_data["targets"]
        if targets:
            require_manager(request.user, course)
            report = lifecycle.enroll_by_email(targets, course)
            return Response(
                {
                    "success_count": report.success_count,
                    "not_found_count": report.not_found_count,
                    "not_found": report.not_found,
                }
            )
        enrollment, created = lifecycle.enroll(request.user, course)
        message = "Enrolled successfully" if created else "Enrollment renewed"
        return Response({"message": message, "enrollment": _enrollment_summary(enrollment)})

    @action(detail=True, methods=["get"])
    def gradebook(self, request, pk=None):
        course = self.get_object()
        return Response(build_gradebook(request.user, course))

    @action(detail=True, methods=["post"])
    def lessons(self, request, pk=None):
        course = self.get_object()
        serializer = LessonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lesson = serializer.save(course=course)
        logger.info("Lesson %s (%s) added to course %s", lesson.pk, lesson.type, course.pk)
        return Response(LessonSerializer(lesson).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"])
    def discussions(self, request, pk=None):
        course = self.get_object()
        if request.method == "GET":
            topics = (
                DiscussionTopic.objects.filter(course=course)
                .select_related("user__profile")
                .annotate(reply_count=Count("replies"))
            )
            return Response(DiscussionTopicSerializer(topics, many=True).data)
        serializer = DiscussionTopicSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        topic = serializer.save(course=course, user=request.user)
        data = DiscussionTopicSerializer(topic).data
        broadcast(course.pk, "topic_created", data)
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"])
    def feedback(self, request, pk=None):
        course = self.get_object()
        manager = request.course_access.manager
        if request.method == "GET":
            qs = CourseFeedback.objects.filter(course=course).select_related("user__profile")
            if not manager:
                qs = qs.filter(user=request.user)
            return Response(CourseFeedbackSerializer(qs, many=True).data)
        if manager:
            raise Forbidden("Course managers cannot rate their own course.")
        if not compute_progress(request.user, course).is_complete:
            raise Forbidden("Complete the course before leaving feedback.")
        serializer = CourseFeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                feedback = serializer.save(course=course, user=request.user)
        except IntegrityError:
            raise ValidationFailure("You have already left feedback for this course.")
        return Response(CourseFeedbackSerializer(feedback).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def certificate(self, request, pk=None):
        course = self.get_object()
        if not flags_for(request).enabled(ENABLE_CERTIFICATES):
            raise FeatureDisabled("Certificates are currently disabled.")
        if not compute_progress(request.user, course).is_complete:
            raise Forbidden("Complete every lesson to earn a certificate.")
        certificate, created = Certificate.objects.get_or_create(user=request.user, course=course)
        if created:
            logger.info("Issued certificate %s to user %s for course %s", certificate.unique_id, request.user.pk, course.pk)
        return Response(
            CertificateSerializer(certificate).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class LessonViewSet(mixins.UpdateModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = Lesson.objects.select_related("course").all()
    serializer_class = LessonSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.action in ("update", "partial_update", "destroy", "submissions"):
            return [IsAuthenticated(), CanManageCourse()]
        return [IsAuthenticated(), HasCourseAccess()]

    def get_visible_lesson(self) -> Lesson:
        lesson = self.get_object()
        if not self.request.course_access.manager and not lesson.is_visible_to(self.request.user):
            raise NotFound("Lesson not found")
        return lesson

    @action(detail=True, methods=["get"])
    def quiz(self, request, pk=None):
        lesson = self.get_visible_lesson()
        if lesson.type != LessonType.QUIZ:
            raise ValidationFailure("This lesson is not a quiz.")
        return Response(
            {
                "lesson_id": lesson.pk,
                "title": lesson.title,
                "questions": QuizQuestionSerializer(lesson.questions.all(), many=True).data,
            }
        )

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        lesson = self.get_visible_lesson()
        if lesson.type == LessonType.QUIZ:
            serializer = QuizSubmitSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            submission, result = record_quiz_submission(request.user, lesson, serializer.validated_data["answers"])
            return Response(
                {
                    "submission": SubmissionSerializer(submission).data,
                    "score": result["score"],
                    "correct": result["correct"],
                    "total": result["total"],
                },
                status=status.HTTP_201_CREATED,
            )
        if lesson.type == LessonType.ASSIGNMENT:
            if not flags_for(request).enabled(ENABLE_STUDENT_UPLOADS):
                raise FeatureDisabled("Assignment uploads are currently disabled.")
            serializer = AssignmentUploadSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            submission, created = submit_assignment(request.user, lesson, serializer.validated_data["file"])
            return Response(
                OwnAssignmentSubmissionSerializer(submission, context={"request": request}).data,
                status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
            )
        submission = Submission.objects.create(user=request.user, lesson=lesson, score=100)
        return Response({"submission": SubmissionSerializer(submission).data}, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        lesson = self.get_visible_lesson()
        if lesson.is_gradable:
            raise ValidationFailure("Quizzes and assignments are completed by submitting them.")
        submission, created = mark_complete(request.user, lesson)
        return Response(
            {"submission": SubmissionSerializer(submission).data, "created": created},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["get"])
    def submissions(self, request, pk=None):
        lesson = self.get_object()
        qs = AssignmentSubmission.objects.filter(lesson=lesson).select_related("user__profile")
        return Response(AssignmentSubmissionSerializer(qs, many=True, context={"request": request}).data)


class AssignmentSubmissionViewSet(viewsets.GenericViewSet):
    queryset = AssignmentSubmission.objects.select_related("lesson__course", "user__profile")
    serializer_class = GradeSerializer
    permission_classes = [IsAuthenticated, CanManageCourse]

    @action(detail=True, methods=["put"])
    def grade(self, request, pk=None):
        submission = self.get_object()
        serializer = GradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        grade_assignment(submission, serializer.validated_data["grade"], serializer.validated_data["feedback"])
        return Response(AssignmentSubmissionSerializer(submission, context={"request": request}).data)


class DiscussionTopicViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = (
        DiscussionTopic.objects.select_related("course", "user__profile")
        .prefetch_related("replies__user__profile")
        .annotate(reply_count=Count("replies"))
    )
    serializer_class = DiscussionTopicDetailSerializer
    permission_classes = [IsAuthenticated, HasCourseAccess]

    @action(detail=True, methods=["post"])
    def replies(self, request, pk=None):
        topic = self.get_object()
        serializer = DiscussionReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reply = serializer.save(topic=topic, user=request.user)
        data = DiscussionReplySerializer(reply).data
        broadcast(topic.course_id, "reply_created", data)
        return Response(data, status=status.HTTP_201_CREATED)


class EnrollmentViewSet(mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Instructor-side enrollment management (owner teacher or admin)."""

    queryset = Enrollment.objects.select_related("course", "user__profile")
    serializer_class = EnrollmentSerializer
    permission_classes = [IsAuthenticated, CanManageCourse]

    def perform_destroy(self, instance):
        lifecycle.remove(instance)

    @action(detail=True, methods=["put"])
    def toggle(self, request, pk=None):
        enrollment = lifecycle.toggle(self.get_object())
        return Response({"id": enrollment.pk, "is_active": enrollment.is_active})

    @action(detail=True, methods=["put"])
    def note(self, request, pk=None):
        enrollment = self.get_object()
        serializer = EnrollmentNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lifecycle.update_note(enrollment, serializer.validated_data["note"])
        return Response({"id": enrollment.pk, "teacher_notes": enrollment.teacher_notes})


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Notification.objects.filter(user=self.request.user)
        if self.action == "list":
            qs = qs.filter(is_read=False)
        return qs

    @action(detail=True, methods=["put"])
    def read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
        return Response({"id": notification.pk, "is_read": True})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def dashboard(request):
    return Response(student_dashboard(request.user))


@api_view(["GET"])
@permission_classes([AllowAny])
def verify_certificate(request, unique_id: str):
    certificate = Certificate.objects.select_related("course", "user__profile").filter(unique_id=unique_id).first()
    if certificate is None:
        raise NotFound("Certificate not found")
    return Response(CertificateSerializer(certificate).data)


def _taught_courses(user):
    qs = Course.objects.all()
    if not is_admin(user):
        qs = qs.filter(owner=user)
    return qs


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsInstructor])
def teacher_courses(request):
    courses = (
        _taught_courses(request.user)
        .select_related("owner__profile")
        .annotate(student_count=Count("enrollments", distinct=True), lesson_count=Count("lessons", distinct=True))
    )
    rows = []
    for course in courses:
        row = CourseSerializer(course).data
        row["student_count"] = course.student_count
        row["lesson_count"] = course.lesson_count
        rows.append(row)
    return Response(rows)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsInstructor])
def teacher_students(request):
    enrollments = (
        Enrollment.objects.filter(course__in=_taught_courses(request.user))
        .select_related("course", "user__profile")
        .order_by("course__title", "user__email")
    )
    course_id = request.query_params.get("course")
    if course_id and course_id.isdigit():
        enrollments = enrollments.filter(course_id=course_id)
    return Response(EnrollmentSerializer(enrollments, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsInstructor])
def teacher_candidates(request):
    """Students an instructor can pick for enrollment or assignment targeting."""
    students = (
        User.objects.filter(profile__role=Role.STUDENT, is_active=True)
        .select_related("profile")
        .order_by("profile__full_name", "email")
    )
    return Response(UserSerializer(students, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsInstructor])
def teacher_discussions(request):
    topics = (
        DiscussionTopic.objects.filter(course__in=_taught_courses(request.user))
        .select_related("course", "user__profile")
        .annotate(reply_count=Count("replies"))
        .order_by("-created_at", "-id")
    )
    search = request.query_params.get("search", "").strip()
    if search:
        topics = topics.filter(title__icontains=search)
    return Response(TeacherTopicSerializer(topics, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated, IsInstructor])
def teacher_calendar(request):
    """Due quizzes and assignments of taught courses, plus the caller's own tasks."""
    lessons = (
        Lesson.objects.filter(
            course__in=_taught_courses(request.user),
            type__in=GRADABLE_TYPES,
            due_date__isnull=False,
        )
        .select_related("course")
    )
    events = [
        {
            "id": f"lesson-{lesson.pk}",
            "title": f"{lesson.course.title}: {lesson.title}",
            "date": timezone.localdate(lesson.due_date),
            "type": lesson.type,
            "course_id": lesson.course_id,
        }
        for lesson in lessons
    ]
    events.extend(
        {
            "id": f"task-{task.pk}",
            "title": task.title,
            "date": task.date,
            "type": "personal",
            "description": task.description,
        }
        for task in CalendarTask.objects.filter(user=request.user)
    )
    events.sort(key=lambda event: (event["date"], event["id"]))
    return Response(events)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsInstructor])
def create_calendar_task(request):
    serializer = CalendarTaskSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    task = serializer.save(user=request.user)
    return Response(CalendarTaskSerializer(task).data, status=status.HTTP_201_CREATED)


@api_view(["DELETE"])
@permission_classes([IsAuthenticated, IsInstructor])
def delete_calendar_task(request, task_id: str):
    deleted, _ = CalendarTask.objects.filter(pk=task_id, user=request.user).delete()
    if not deleted:
        raise NotFound("Task not found")
    return Response({"message": "Task deleted"})
