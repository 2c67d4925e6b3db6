"""
Request and response models exchanged over the REST API.
"""

from .auth import (
    AuthPayload,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from .categories import (
    CategoryBrief,
    CategoryCreate,
    CategoryData,
    CategoryDetail,
    CategoryDetailData,
    CategoryListData,
    CategoryRead,
    CategoryUpdate,
)
from .common import ApiResponse, IOModel, Pagination
from .courses import (
    CourseBrief,
    CourseCreate,
    CourseData,
    CourseDetail,
    CourseDetailData,
    CourseListData,
    CourseSummary,
    CourseUpdate,
    LessonCreate,
    LessonData,
    LessonOutline,
    LessonRead,
    LessonUpdate,
    SectionCreate,
    SectionData,
    SectionRead,
    SectionUpdate,
    TutorBrief,
)
from .enrollments import (
    CertificateRead,
    CourseStudentRead,
    CourseStudentsData,
    EnrollmentData,
    EnrollmentDetail,
    EnrollmentDetailData,
    EnrollmentListData,
    EnrollmentRead,
    PaymentRequiredData,
    ProgressRead,
    ProgressResult,
    ProgressUpdate,
)
from .payments import CreateIntentRequest, PaymentData, PaymentIntentData, PaymentListData, PaymentRead, WebhookAck
from .reviews import LikeResult, ReviewCreate, ReviewData, ReviewListData, ReviewRead, ReviewStatistics, ReviewUpdate
from .uploads import UploadedFile, UploadedFiles
from .users import ProfileUpdate, UserBrief, UserData, UserRead

__all__ = [
    "ApiResponse",
    "AuthPayload",
    "CategoryBrief",
    "CategoryCreate",
    "CategoryData",
    "CategoryDetail",
    "CategoryDetailData",
    "CategoryListData",
    "CategoryRead",
    "CategoryUpdate",
    "CertificateRead",
    "ChangePasswordRequest",
    "CourseBrief",
    "CourseCreate",
    "CourseData",
    "CourseDetail",
    "CourseDetailData",
    "CourseListData",
    "CourseStudentRead",
    "CourseStudentsData",
    "CourseSummary",
    "CourseUpdate",
    "CreateIntentRequest",
    "EnrollmentData",
    "EnrollmentDetail",
    "EnrollmentDetailData",
    "EnrollmentListData",
    "EnrollmentRead",
    "ForgotPasswordRequest",
    "IOModel",
    "LessonCreate",
    "LessonData",
    "LessonOutline",
    "LessonRead",
    "LessonUpdate",
    "LikeResult",
    "LoginRequest",
    "Pagination",
    "PaymentData",
    "PaymentIntentData",
    "PaymentListData",
    "PaymentRead",
    "PaymentRequiredData",
    "ProfileUpdate",
    "ProgressRead",
    "ProgressResult",
    "ProgressUpdate",
    "RegisterRequest",
    "ResetPasswordRequest",
    "ReviewCreate",
    "ReviewData",
    "ReviewListData",
    "ReviewRead",
    "ReviewStatistics",
    "ReviewUpdate",
    "SectionCreate",
    "SectionData",
    "SectionRead",
    "SectionUpdate",
    "TutorBrief",
    "UploadedFile",
    "UploadedFiles",
    "UserBrief",
    "UserData",
    "UserRead",
    "VerifyEmailRequest",
    "WebhookAck",
]
