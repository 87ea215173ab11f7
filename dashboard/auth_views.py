"""
Login endpoint.

Kept apart from ``dashboard.authentication`` so that DRF can import the
authentication class during start-up without pulling in the views.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from dashboard.serializers.auth import LoginSerializer
from dashboard.services.audit import log_action


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """Username/password login; the role always comes from the stored user."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        # only the attempted username is recorded
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'Invalid username or password.'}}, status=400)

    log_action(user=user, action='login', object_type='user', object_id=str(user.pk),
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})
    token, _ = Token.objects.get_or_create(user=user)
    return Response({
        'ok': True,
        'token': token.key,
        'role': user.role,
        'user': {
            'id': user.pk,
            'username': user.username,
            'name': user.get_full_name() or user.username,
            'role': user.role,
        },
    })

login_view.cls.throttle_scope = 'login'
