from django.urls import path
from .views import OrdersCollectionView, RetrieveOrderView, RetrieveOrderBySessionView
app_name = "orders"

urlpatterns = [
    path("", OrdersCollectionView.as_view(), name="orders-collection"),  # POST create
    path("<int:oid>/", RetrieveOrderView.as_view(), name="orders-detail"),
    path("session/<str:session_id>/", RetrieveOrderBySessionView.as_view(), name="orders-by-session"),
]
