from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from accounts.permissions import allowed
from accounts.policy import Action

from . import services
from .serializers import BankQuestionSerializer, TagSerializer


# ----------------- TAGS -----------------


@api_view(["GET"])
@permission_classes([allowed(Action.QUESTION_BANK_MANAGE)])
def tag_tree_view(request):
    return Response({"success": True, "message": "Tags retrieved successfully.", "data": services.tag_tree()})


@api_view(["POST", "PUT"])
@permission_classes([allowed(Action.TAGS_MANAGE, "Not authorized to manage tags")])
def tag_category_view(request, category):
    if request.method == "PUT":
        updated = services.rename_tag(
            category,
            request.data.get("oldValue", request.data.get("old_value")),
            request.data.get("newValue", request.data.get("new_value")),
        )
        return Response({
            "success": True,
            "message": "Tag updated successfully.",
            "data": {"updated": updated, "tags": services.tag_tree()},
        })

    created = services.add_tag(category, request.data)
    return Response({
        "success": True,
        "message": "Tag added successfully." if created else "Tag already exists.",
        "data": {"created": TagSerializer(created, many=True).data, "tags": services.tag_tree()},
    }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(["DELETE"])
@permission_classes([allowed(Action.TAGS_MANAGE, "Not authorized to manage tags")])
def tag_delete_view(request, category, value):
    services.delete_tag(category, value)
    return Response({"success": True, "message": "Tag deleted successfully.", "data": services.tag_tree()})


@api_view(["POST"])
@permission_classes([allowed(Action.TAGS_MANAGE, "Not authorized to manage tags")])
@parser_classes([MultiPartParser, FormParser])
def tag_upload_view(request):
    rows = services.import_tags_csv(request.FILES.get("file"))
    return Response({
        "success": True,
        "message": f"Imported {rows} tag rows.",
        "data": services.tag_tree(),
    }, status=status.HTTP_201_CREATED)


# ----------------- QUESTIONS -----------------


@api_view(["GET", "POST"])
@permission_classes([allowed(Action.QUESTION_BANK_MANAGE)])
def question_list_view(request):
    if request.method == "POST":
        rows = request.data.get("questions") if isinstance(request.data, dict) else request.data
        count = services.import_questions(rows)
        return Response({
            "success": True,
            "message": f"{count} questions imported successfully.",
            "data": {"count": count},
        }, status=status.HTTP_201_CREATED)

    result = services.search_questions(
        filters=request.query_params.get("filters"),
        search_query=request.query_params.get("searchQuery", ""),
        page=request.query_params.get("page"),
        limit=request.query_params.get("limit"),
    )
    return Response({
        "success": True,
        "message": "Questions retrieved successfully.",
        "data": {
            "questions": BankQuestionSerializer(result["questions"], many=True).data,
            "pagination": result["pagination"],
        },
    })


@api_view(["PATCH", "PUT"])
@permission_classes([allowed(Action.QUESTION_BANK_MANAGE)])
def question_bulk_update_view(request):
    rows = request.data.get("questions") if isinstance(request.data, dict) else request.data
    updated = services.bulk_update_questions(rows)
    return Response({
        "success": True,
        "message": f"{len(updated)} questions updated successfully.",
        "data": BankQuestionSerializer(updated, many=True).data,
    })


@api_view(["DELETE"])
@permission_classes([allowed(Action.QUESTION_BANK_MANAGE)])
def question_delete_view(request, question_id):
    services.delete_question(question_id)
    return Response({"success": True, "message": "Question deleted successfully"})
