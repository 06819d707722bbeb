"""
URL configuration for friends API.

All URLs are prefixed with /api/v1/friends/ in the main URL configuration.
"""

from django.urls import path

from friends import views

app_name = "friends"

urlpatterns = [
    path("", views.FriendListView.as_view(), name="friend-list"),
    path("<uuid:user_id>/", views.FriendDetailView.as_view(), name="friend-detail"),
    path("requests/", views.FriendRequestCreateView.as_view(), name="request-create"),
    path(
        "requests/incoming/",
        views.IncomingRequestsView.as_view(),
        name="request-incoming",
    ),
    path(
        "requests/outgoing/",
        views.OutgoingRequestsView.as_view(),
        name="request-outgoing",
    ),
    path(
        "requests/<uuid:request_id>/accept/",
        views.AcceptRequestView.as_view(),
        name="request-accept",
    ),
    path(
        "requests/<uuid:request_id>/reject/",
        views.RejectRequestView.as_view(),
        name="request-reject",
    ),
    path(
        "status/<uuid:user_id>/",
        views.FriendshipStatusView.as_view(),
        name="status",
    ),
    path("mute/<uuid:user_id>/", views.MuteView.as_view(), name="mute"),
    path("block/<uuid:user_id>/", views.BlockView.as_view(), name="block"),
]
