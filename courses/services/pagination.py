from django.conf import settings
from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class CustomPagination(PageNumberPagination):
    page_size = getattr(settings, "DEFAULT_PAGE_SIZE", 10)
    page_size_query_param = "page_size"
    max_page_size = getattr(settings, "MAX_PAGE_SIZE", 100)


def paginate_queryset_or_list(request, queryset_or_list, serializer_class=None, serializer_kwargs=None,
                              message="Data retrieved successfully."):
    """
    Paginate a queryset or list for endpoints that build their own response.

    Returns a Response in the form:
        {
            "success": True,
            "message": "...",
            "data": [...],
            "count": total_count,
            "page_size": page_size,
            "current_page": current_page,
            "total_pages": total_pages,
            "next": next page number or None,
            "previous": previous page number or None
        }
    """
    default_page_size = getattr(settings, "DEFAULT_PAGE_SIZE", 10)
    max_page_size = getattr(settings, "MAX_PAGE_SIZE", 100)

    try:
        page_number = int(request.query_params.get("page", 1))
    except (ValueError, TypeError):
        page_number = 1
    try:
        page_size = min(max(int(request.query_params.get("page_size", default_page_size)), 1), max_page_size)
    except (ValueError, TypeError):
        page_size = default_page_size

    paginator = Paginator(queryset_or_list, page_size)
    try:
        page = paginator.page(page_number)
    except PageNotAnInteger:
        page = paginator.page(1)
    except EmptyPage:
        page = paginator.page(paginator.num_pages)

    if serializer_class:
        serializer = serializer_class(page.object_list, many=True, **(serializer_kwargs or {}))
        data = serializer.data
    else:
        data = list(page.object_list)

    return Response({
        "success": True,
        "message": message,
        "data": data,
        "count": paginator.count,
        "page_size": page_size,
        "current_page": page.number,
        "total_pages": paginator.num_pages,
        "next": page.next_page_number() if page.has_next() else None,
        "previous": page.previous_page_number() if page.has_previous() else None,
    })
