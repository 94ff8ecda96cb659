from django.core.management.base import BaseCommand

from RecitationReportApp.domain.services import assessment_service

class Command(BaseCommand):
    help = "Recompute stored category and final scores from the stored marks."

    def handle(self, *args, **options):
        updated = assessment_service.recalculate_scores()
        self.stdout.write(self.style.SUCCESS(f"Updated {updated} assessments"))
