from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'orders'

router = SimpleRouter()
router.register(r'', views.OrderViewSet, basename='order')

urlpatterns = [
    # GET    /api/orders/                  - List orders (filter, sort, paginate)
    # POST   /api/orders/                  - Create order
    # GET    /api/orders/board/            - Active orders grouped by status
    # POST   /api/orders/tender/           - Cash tender calculator
    # GET    /api/orders/denominations/    - Configured notes and coins
    # GET    /api/orders/stats/overview/   - Dashboard statistics
    # GET    /api/orders/{id}/             - Order detail
    # PATCH  /api/orders/{id}/             - Update express, stains, payment
    # DELETE /api/orders/{id}/             - Delete order (admin)
    # PATCH  /api/orders/{id}/status/      - Change status
    # POST   /api/orders/{id}/advance/     - Move to next status
    path('', include(router.urls)),
]
