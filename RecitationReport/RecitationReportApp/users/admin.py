from django.contrib import admin, messages
from rest_framework.exceptions import APIException
from simple_history.admin import SimpleHistoryAdmin

from RecitationReportApp.core.access import Actor
from RecitationReportApp.domain.services import account_service
from RecitationReportApp.users.models import StudentProfile, User


class StudentProfileInline(admin.StackedInline):
    model = StudentProfile
    can_delete = False
    extra = 0


@admin.register(User)
class UserAdmin(SimpleHistoryAdmin):
    list_display = ("email", "name", "role", "approval_state", "date_joined")
    list_filter = ("role", "approval_state")
    search_fields = ("email", "name", "student_profile__registration_number")
    # Approval changes only through the actions below.
    readonly_fields = ("role", "approval_state", "date_joined", "last_login")
    exclude = ("password", "username", "first_name", "last_name", "groups", "user_permissions")
    inlines = [StudentProfileInline]
    actions = ["approve_selected", "reject_selected"]

    def has_add_permission(self, request):
        # Accounts come from registration or the seed_admin command.
        return False

    def _decide(self, request, queryset, decide):
        actor = Actor.from_user(request.user)
        done = 0
        for account in queryset:
            try:
                decide(actor, account.pk)
            except APIException as exc:
                self.message_user(request, f"{account.email}: {exc.detail}", messages.ERROR)
            else:
                done += 1
        return done

    @admin.action(description="Approve selected accounts")
    def approve_selected(self, request, queryset):
        done = self._decide(request, queryset, account_service.approve_account)
        self.message_user(request, f"{done} account(s) processed.", messages.SUCCESS)

    @admin.action(description="Reject selected accounts")
    def reject_selected(self, request, queryset):
        done = self._decide(request, queryset, account_service.reject_account)
        self.message_user(request, f"{done} account(s) processed.", messages.SUCCESS)
