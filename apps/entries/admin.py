from django.contrib import admin, messages
from django.utils import timezone

from .models import Entry
from .services.repository import clear_all_entries


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'username', 'amount', 'prize', 'created_at')
    list_filter = ('amount', 'timestamp')
    search_fields = ('username',)
    readonly_fields = ('id', 'created_at')
    actions = ['clear_everything']

    def clear_everything(self, request, queryset):
        clear_all_entries()
        messages.add_message(
            request,
            messages.WARNING,
            f"All entries cleared at {timezone.localtime():%Y-%m-%d %H:%M}.",
        )

    clear_everything.short_description = 'Clear all entries (ignores selection)'
