from django.contrib import admin

from .models import BadgeProgress, Reward, StarAccount, StarMilestone


@admin.register(BadgeProgress)
class BadgeProgressAdmin(admin.ModelAdmin):
    list_display = ('player_id', 'difficulty', 'lifetime_earned_count', 'official_badge_count', 'updated_at')
    list_filter = ('difficulty',)
    search_fields = ('player_id',)
    # Counters change only through the progression services
    readonly_fields = ('lifetime_earned_count', 'official_badge_count', 'created_at', 'updated_at')


@admin.register(Reward)
class RewardAdmin(admin.ModelAdmin):
    list_display = (
        'player_id',
        'difficulty',
        'badge_number',
        'state',
        'earned_date',
        'requested_date',
        'claimed_date',
        'awarded_by_username',
    )
    list_filter = ('state', 'difficulty')
    search_fields = ('player_id', 'awarded_by_username')
    ordering = ('-earned_date',)
    readonly_fields = (
        'player_id', 'difficulty', 'badge_number', 'earned_date', 'state',
        'requested_date', 'claimed_date', 'awarded_by_id', 'awarded_by_username', 'updated_at',
    )
    date_hierarchy = 'earned_date'

    def has_add_permission(self, request):
        return False


@admin.register(StarAccount)
class StarAccountAdmin(admin.ModelAdmin):
    list_display = ('player_id', 'total_stars', 'updated_at')
    search_fields = ('player_id',)
    ordering = ('-total_stars',)
    readonly_fields = ('total_stars', 'created_at', 'updated_at')


@admin.register(StarMilestone)
class StarMilestoneAdmin(admin.ModelAdmin):
    list_display = ('player_id', 'icon', 'tier', 'stars_required', 'stars_at_achievement', 'achieved_at')
    list_filter = ('tier',)
    search_fields = ('player_id',)
    readonly_fields = ('player_id', 'tier', 'icon', 'prize', 'stars_required', 'stars_at_achievement', 'achieved_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
