from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

  initial = True

  dependencies = []

  operations = [
    migrations.CreateModel(
      name='Resolver',
      fields=[
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('address', models.CharField(max_length=42, unique=True)),
        ('owner', models.CharField(max_length=42)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
      ],
    ),
    migrations.CreateModel(
      name='OffchainRecord',
      fields=[
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('name', models.TextField()),
        ('data', models.TextField()),
        ('result', models.TextField()),
        ('updated_at', models.DateTimeField(auto_now=True)),
      ],
      options={
        'unique_together': {('name', 'data')},
      },
    ),
    migrations.CreateModel(
      name='Signer',
      fields=[
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('address', models.CharField(max_length=42)),
        ('added_at', models.DateTimeField(auto_now_add=True)),
        ('resolver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='signers', to='resolver.resolver')),
      ],
      options={
        'unique_together': {('resolver', 'address')},
      },
    ),
    migrations.CreateModel(
      name='GatewayUrl',
      fields=[
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('position', models.PositiveIntegerField()),
        ('url', models.CharField(max_length=500)),
        ('resolver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='urls', to='resolver.resolver')),
      ],
      options={
        'ordering': ['position'],
        'unique_together': {('resolver', 'position')},
      },
    ),
    migrations.CreateModel(
      name='RegistryEvent',
      fields=[
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('event_type', models.CharField(choices=[('new_signers', 'New signers'), ('signers_removed', 'Signers removed'), ('new_url', 'New url'), ('url_removed', 'Url removed'), ('ownership_transferred', 'Ownership transferred')], max_length=50)),
        ('caller', models.CharField(max_length=42)),
        ('payload', models.JSONField(blank=True, default=dict)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('resolver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='resolver.resolver')),
      ],
      options={
        'ordering': ['id'],
      },
    ),
  ]
