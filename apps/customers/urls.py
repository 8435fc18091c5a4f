from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'customers'

router = SimpleRouter()
router.register(r'', views.CustomerViewSet, basename='customer')

urlpatterns = [
    # GET    /api/customers/          - Search customers
    # POST   /api/customers/          - Create (or update by phone)
    # GET    /api/customers/{id}/     - Customer with recent orders
    # PATCH  /api/customers/{id}/     - Update customer
    # DELETE /api/customers/{id}/     - Delete customer without orders
    path('', include(router.urls)),
]
