from django.db import models


class OffchainRecord(models.Model):
  """
  Gateway-side answer for one resolve(name, data) call.

  All three fields are 0x-prefixed hex of opaque bytes: the DNS-encoded
  name, the inner resolver call and the result the gateway signs. Lookup
  is an exact match on (name, data).
  """
  name = models.TextField()
  data = models.TextField()
  result = models.TextField()
  updated_at = models.DateTimeField(auto_now=True)

  class Meta:
    app_label = 'resolver'
    unique_together = ['name', 'data']

  def __str__(self):
    return f'{self.name[:18]}... / {self.data[:10]}'

  def save(self, *args, **kwargs):
    # Lookups compare lower-case 0x-prefixed hex
    for field in ('name', 'data', 'result'):
      value = getattr(self, field).lower()
      if not value.startswith('0x'):
        value = '0x' + value
      setattr(self, field, value)
    super().save(*args, **kwargs)
