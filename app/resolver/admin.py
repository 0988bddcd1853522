from django.contrib import admin

from resolver.models import (
  GatewayUrl,
  OffchainRecord,
  RegistryEvent,
  Resolver,
  Signer,
)


class ReadOnlyAdmin(admin.ModelAdmin):
  """Registry state changes only through the owner-gated registry functions."""

  def has_add_permission(self, request):
    return False

  def has_change_permission(self, request, obj=None):
    return False

  def has_delete_permission(self, request, obj=None):
    return False


@admin.register(Resolver)
class ResolverAdmin(ReadOnlyAdmin):
  list_display = ['address', 'owner', 'created_at', 'updated_at']
  search_fields = ['address', 'owner']


@admin.register(Signer)
class SignerAdmin(ReadOnlyAdmin):
  list_display = ['resolver', 'address', 'added_at']
  search_fields = ['address', 'resolver__address']


@admin.register(GatewayUrl)
class GatewayUrlAdmin(ReadOnlyAdmin):
  list_display = ['resolver', 'position', 'url']
  search_fields = ['url', 'resolver__address']


@admin.register(RegistryEvent)
class RegistryEventAdmin(ReadOnlyAdmin):
  list_display = ['resolver', 'event_type', 'caller', 'created_at']
  search_fields = ['caller', 'resolver__address']
  list_filter = ['event_type']


@admin.register(OffchainRecord)
class OffchainRecordAdmin(admin.ModelAdmin):
  list_display = ['name', 'data', 'updated_at']
  search_fields = ['name', 'data']
  readonly_fields = ['updated_at']
