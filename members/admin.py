from django.contrib import admin
from .models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'phone', 'room_number', 'floor', 'share_type', 'amount', 'status', 'joining_date']
    list_filter = ['status', 'share_type', 'floor', 'gender']
    search_fields = ['full_name', 'phone', 'email', 'room_number']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'joining_date'

    fieldsets = (
        ('Personal', {
            'fields': ('full_name', 'gender', 'age', 'occupation', 'profile_pic')
        }),
        ('Contact', {
            'fields': ('phone', 'email', 'emergency_contact', 'address')
        }),
        ('Room', {
            'fields': ('room_number', 'floor', 'share_type', 'amount', 'status', 'joining_date')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        # Members are created through MemberService
        return False

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        return fields + ['room_number', 'floor', 'share_type', 'status', 'phone', 'email']
