from __future__ import annotations

from django.db.models.signals import post_save
from django.dispatch import receiver

from accounts.models import display_name
from courses.models import Enrollment
from discussions.models import DiscussionReply
from lessons.models import AssignmentSubmission, LessonType, Submission
from .models import Notification


@receiver(post_save, sender=Enrollment)
def notify_enrollment(sender, instance: Enrollment, created: bool, **kwargs):
    if not created:
        return
    # Notify teacher (course owner) about the new enrollment
    course = instance.course
    if course.owner_id == instance.user_id:
        return
    Notification.objects.create(
        user_id=course.owner_id,
        actor=instance.user,
        type=Notification.TYPE_ENROLLMENT,
        course=course,
        message=f"New enrollment: {display_name(instance.user)} in {course.title}"[:255],
        link=f"#/gradebook/{course.id}",
    )


@receiver(post_save, sender=Submission)
def notify_quiz_submission(sender, instance: Submission, created: bool, **kwargs):
    lesson = instance.lesson
    if not created or lesson.type != LessonType.QUIZ:
        return
    course = lesson.course
    Notification.objects.create(
        user_id=course.owner_id,
        actor=instance.user,
        type=Notification.TYPE_SUBMISSION,
        course=course,
        message=f"{display_name(instance.user)} completed quiz: {lesson.title}"[:255],
        link=f"#/gradebook/{course.id}",
    )


@receiver(post_save, sender=AssignmentSubmission)
def notify_assignment_submission(sender, instance: AssignmentSubmission, created: bool, update_fields=None, **kwargs):
    lesson = instance.lesson
    course = lesson.course
    if created or (update_fields and "file" in update_fields):
        Notification.objects.create(
            user_id=course.owner_id,
            actor=instance.user,
            type=Notification.TYPE_SUBMISSION,
            course=course,
            message=f"{display_name(instance.user)} submitted assignment: {lesson.title}"[:255],
            link=f"#/gradebook/{course.id}",
        )
    elif update_fields and "grade" in update_fields and instance.grade is not None:
        Notification.objects.create(
            user_id=instance.user_id,
            type=Notification.TYPE_SYSTEM,
            course=course,
            message=f"Your assignment {lesson.title} was graded: {instance.grade}"[:255],
            link=f"#/course/{course.id}",
        )


@receiver(post_save, sender=DiscussionReply)
def notify_discussion_reply(sender, instance: DiscussionReply, created: bool, **kwargs):
    if not created:
        return
    topic = instance.topic
    # Authors are not notified of their own replies
    if topic.user_id == instance.user_id:
        return
    Notification.objects.create(
        user_id=topic.user_id,
        actor=instance.user,
        type=Notification.TYPE_REPLY,
        course_id=topic.course_id,
        message=f"{display_name(instance.user)} replied to your topic: {topic.title}"[:255],
        link=f"#/course/{topic.course_id}",
    )
