"""
API URLs for the co-living admin
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from members.views import MemberViewSet
from rooms.views import RoomViewSet
from rent.views import RentViewSet

# Create router
router = DefaultRouter()
router.register(r'members', MemberViewSet, basename='member')
router.register(r'rooms', RoomViewSet, basename='room')
router.register(r'rent', RentViewSet, basename='rent')

urlpatterns = [
    # JWT Authentication
    path('auth/login/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # API routes
    path('', include(router.urls)),
]
