from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from courses.services.pagination import paginate_queryset_or_list
from lms_backend.clients import ClientsMixin

from . import services
from .serializers import CommunityPostSerializer, PostCommentSerializer


class PostListView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return paginate_queryset_or_list(
            request, services.list_posts(), CommunityPostSerializer, message="Posts retrieved successfully."
        )

    def post(self, request):
        post = services.create_post(
            request.user, request.data, self.clients.storage, files=request.FILES.getlist("attachments")
        )
        return Response({
            "success": True,
            "message": "Post created successfully.",
            "data": CommunityPostSerializer(post).data,
        }, status=status.HTTP_201_CREATED)


class PostDetailView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, post_id):
        post = services.get_post(post_id)
        return Response({"success": True, "message": "Post retrieved successfully.", "data": CommunityPostSerializer(post).data})

    def put(self, request, post_id):
        post = services.update_post(
            request.user,
            services.get_post(post_id),
            request.data,
            self.clients.storage,
            files=request.FILES.getlist("attachments"),
        )
        return Response({"success": True, "message": "Post updated successfully.", "data": CommunityPostSerializer(post).data})

    patch = put

    def delete(self, request, post_id):
        services.delete_post(request.user, services.get_post(post_id), self.clients.storage)
        return Response({"success": True, "message": "Post deleted successfully"})


class PostAttachmentView(ClientsMixin, APIView):
    permission_classes = [IsAuthenticated]

    def delete(self, request, post_id, attachment_id):
        services.remove_attachment(request.user, services.get_post(post_id), attachment_id, self.clients.storage)
        return Response({"success": True, "message": "Attachment removed successfully"})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def like_post_view(request, post_id):
    post = services.like_post(request.user, services.get_post(post_id))
    return Response({"success": True, "message": "Post liked.", "data": {"likes": post.likes}})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def add_comment_view(request, post_id):
    comment = services.add_comment(request.user, services.get_post(post_id), request.data.get("content"))
    return Response({
        "success": True,
        "message": "Comment added.",
        "data": PostCommentSerializer(comment).data,
    }, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def search_posts_view(request):
    posts = services.search_posts(request.query_params.get("q"))
    return Response({"success": True, "message": "Search results.", "data": CommunityPostSerializer(posts, many=True).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def posts_by_tag_view(request, tag_name):
    posts = services.posts_by_tag(tag_name)
    return Response({"success": True, "message": "Posts retrieved successfully.", "data": CommunityPostSerializer(posts, many=True).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def popular_posts_view(request):
    posts = services.popular_posts(request.query_params.get("limit"))
    return Response({"success": True, "message": "Popular posts.", "data": CommunityPostSerializer(posts, many=True).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def recent_posts_view(request):
    posts = services.recent_posts(request.query_params.get("limit"))
    return Response({"success": True, "message": "Recent posts.", "data": CommunityPostSerializer(posts, many=True).data})
