from django.contrib import admin
from .models import PaymentRecord


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ['member', 'year', 'month', 'is_paid', 'paid_at', 'reminder_count', 'updated_by', 'version']
    list_filter = ['is_paid', 'year', 'month']
    search_fields = ['member__full_name', 'member__phone', 'member__room_number']
    # Ledger writes go through RentLedgerService so the version check applies
    readonly_fields = ['member', 'year', 'month', 'is_paid', 'paid_at', 'reminders_sent',
                       'updated_at', 'updated_by', 'version']

    fieldsets = (
        ('Member', {
            'fields': ('member', 'year', 'month')
        }),
        ('Payment', {
            'fields': ('is_paid', 'paid_at', 'reminders_sent')
        }),
        ('Audit', {
            'fields': ('updated_at', 'updated_by', 'version'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('member')
