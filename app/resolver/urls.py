from django.urls import path

from resolver.views import ens_gateway
from resolver.views import resolver as resolver_views

app_name = 'resolver'

urlpatterns = [
  # Resolver
  path('resolvers/<str:address>/resolve', resolver_views.resolve, name='resolve'),
  path('resolvers/<str:address>/resolve-with-proof', resolver_views.resolve_with_proof, name='resolve-with-proof'),
  path('resolvers/<str:address>/signers/<str:identity>', resolver_views.signer_status, name='signer-status'),
  path('resolvers/<str:address>/urls', resolver_views.url_list, name='url-list'),
  path('resolvers/<str:address>/admin', resolver_views.admin, name='admin'),

  # ENS Gateway
  path('gateway/', ens_gateway.ccip_read, name='gateway-post'),
  path('gateway/<str:sender>/<str:data>.json', ens_gateway.ccip_read, name='gateway'),
]
