from django.db import models


class Resolver(models.Model):
  """
  One offchain resolver instance. Its address is the identity bound into
  every signed response; only the owner may change its signers or urls.
  """
  address = models.CharField(max_length=42, unique=True)
  owner = models.CharField(max_length=42)
  created_at = models.DateTimeField(auto_now_add=True)
  updated_at = models.DateTimeField(auto_now=True)

  class Meta:
    app_label = 'resolver'

  def __str__(self):
    return f'{self.address[:8]}...{self.address[-4:]}'


class Signer(models.Model):
  """An address authorized to sign gateway responses for a resolver."""
  resolver = models.ForeignKey(Resolver, on_delete=models.CASCADE, related_name='signers')
  address = models.CharField(max_length=42)
  added_at = models.DateTimeField(auto_now_add=True)

  class Meta:
    app_label = 'resolver'
    unique_together = ['resolver', 'address']

  def __str__(self):
    return f'{self.resolver}:{self.address[:8]}...{self.address[-4:]}'


class GatewayUrl(models.Model):
  """
  A gateway URL template advertised in OffchainLookup. `position` is the
  index in the advertised list; removal moves the last url into the gap.
  """
  resolver = models.ForeignKey(Resolver, on_delete=models.CASCADE, related_name='urls')
  position = models.PositiveIntegerField()
  url = models.CharField(max_length=500)

  class Meta:
    app_label = 'resolver'
    ordering = ['position']
    unique_together = ['resolver', 'position']

  def __str__(self):
    return f'{self.resolver}[{self.position}] {self.url}'


class RegistryEvent(models.Model):
  """Change notification for every registry mutation, oldest first."""

  class EventType(models.TextChoices):
    NEW_SIGNERS = 'new_signers', 'New signers'
    SIGNERS_REMOVED = 'signers_removed', 'Signers removed'
    NEW_URL = 'new_url', 'New url'
    URL_REMOVED = 'url_removed', 'Url removed'
    OWNERSHIP_TRANSFERRED = 'ownership_transferred', 'Ownership transferred'

  resolver = models.ForeignKey(Resolver, on_delete=models.CASCADE, related_name='events')
  event_type = models.CharField(max_length=50, choices=EventType.choices)
  caller = models.CharField(max_length=42)
  payload = models.JSONField(default=dict, blank=True)
  created_at = models.DateTimeField(auto_now_add=True)

  class Meta:
    app_label = 'resolver'
    ordering = ['id']

  def __str__(self):
    return f'{self.resolver}: {self.event_type} ({self.created_at:%Y-%m-%d})'
