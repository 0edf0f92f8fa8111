# tasks/management/commands/seed_board.py

from django.core.management.base import BaseCommand
from django.db import DEFAULT_DB_ALIAS, transaction

from common.enums import TaskStatus, PriorityLevel, LabelColor
from tasks.models import Task, Label

SEED_TASKS = {
    TaskStatus.TODO: [
        ("Set up CI/CD pipeline", "Configure GitHub Actions for automated testing and deployment", PriorityLevel.HIGH),
        ("Write API documentation", "Document all REST API endpoints with examples and authentication details", PriorityLevel.MEDIUM),
        ("Add error tracking", "Integrate Sentry for production error monitoring", PriorityLevel.MEDIUM),
        ("Optimize database queries", "Add indexes and optimize slow queries identified in performance testing", PriorityLevel.LOW),
        ("Update dependencies", "Upgrade all packages to latest stable versions", PriorityLevel.LOW),
        ("Design mobile mockups", "Create responsive design mockups for mobile and tablet views", PriorityLevel.MEDIUM),
    ],
    TaskStatus.IN_PROGRESS: [
        ("Implement user authentication", "Add JWT-based authentication with refresh tokens and secure session management", PriorityLevel.HIGH),
        ("Fix login page bug", "Resolve issue where form validation fails on Safari browsers", PriorityLevel.HIGH),
        ("Add unit tests", "Write comprehensive unit tests for core business logic modules", PriorityLevel.MEDIUM),
        ("Refactor payment module", "Extract payment processing logic into reusable service layer", PriorityLevel.MEDIUM),
        ("Update user profile UI", "Redesign profile page with new brand guidelines and improved accessibility", PriorityLevel.LOW),
    ],
    TaskStatus.DONE: [
        ("Deploy to staging", "Successfully deployed v2.1.0 to staging environment for QA testing", PriorityLevel.HIGH),
        ("Database migration", "Migrated production database from PostgreSQL 13 to 15 with zero downtime", PriorityLevel.HIGH),
        ("Security audit", "Completed third-party security audit and addressed all critical findings", PriorityLevel.MEDIUM),
        ("Setup project repository", "Initialized Git repository with proper .gitignore and branch protection rules", PriorityLevel.LOW),
    ],
}

SEED_LABELS = [
    ("Bug", LabelColor.RED),
    ("Feature", LabelColor.BLUE),
    ("Docs", LabelColor.GREEN),
    ("Chore", LabelColor.GRAY),
    ("Design", LabelColor.PURPLE),
]


class Command(BaseCommand):
    help = "Seed the board with demo tasks and default labels when those tables are empty"

    def add_arguments(self, parser):
        parser.add_argument('--database', default=DEFAULT_DB_ALIAS, help="Database alias to seed")

    def handle(self, *args, **options):
        using = options['database']
        self.stdout.write("🔄 Seeding task board...")

        with transaction.atomic(using=using):
            if Task.objects.using(using).exists():
                self.stdout.write("⚠️ Tasks exist, skipping tasks")
            else:
                tasks = [
                    Task(title=title, description=description, priority=priority, status=status, position=position)
                    for status, rows in SEED_TASKS.items()
                    for position, (title, description, priority) in enumerate(rows)
                ]
                Task.objects.using(using).bulk_create(tasks)
                self.stdout.write(f"✅ Created {len(tasks)} tasks")

            if Label.objects.using(using).exists():
                self.stdout.write("⚠️ Labels exist, skipping labels")
            else:
                for name, color in SEED_LABELS:
                    Label(name=name, color=color).save(using=using)
                self.stdout.write(f"✅ Created {len(SEED_LABELS)} labels")

        self.stdout.write(self.style.SUCCESS("🎉 Seeding complete!"))
