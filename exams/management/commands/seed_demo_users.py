from django.contrib.auth.models import User
from django.core.management.base import BaseCommand

from exams.models import UserProfile

DEMO_USERS = [
    {
        "username": "guru",
        "email": "guru@example.com",
        "first_name": "Demo",
        "last_name": "Teacher",
        "role": UserProfile.TEACHER,
        "student_class": "",
    },
    {
        "username": "siswa",
        "email": "siswa@example.com",
        "first_name": "Demo",
        "last_name": "Student",
        "role": UserProfile.STUDENT,
        "student_class": "XII IPA 1",
    },
]


class Command(BaseCommand):
    help = "Creates a demo teacher and a demo student, resetting their passwords if they exist."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password123", help="Password for the demo accounts.")

    def handle(self, *args, **options):
        for data in DEMO_USERS:
            data = dict(data)
            role = data.pop("role")
            student_class = data.pop("student_class")
            username = data.pop("username")

            user, created = User.objects.update_or_create(username=username, defaults=data)
            user.set_password(options["password"])
            user.save()

            UserProfile.objects.update_or_create(
                user=user,
                defaults={"role": role, "student_class": student_class},
            )

            verb = "Created" if created else "Reset"
            self.stdout.write(f"{verb} {role.lower()} account: {username} ({user.email})")

        self.stdout.write(self.style.SUCCESS("Demo users ready."))
