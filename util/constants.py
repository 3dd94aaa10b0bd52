class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    HEALTH = API + "/health"
    VERIFY_CERTIFICATE = V1 + "/verify-certificate"
    CERTIFICATES = V1 + "/certificates"
    CERTIFICATE = CERTIFICATES + "/{cert_id}"
    CERTIFICATE_STATUS = CERTIFICATE + "/status"
    GRADE_SHEETS = V1 + "/grade-sheets"
    OWNER_DOCUMENTS = V1 + "/owners/{owner_id}/documents"
    ACCESS_REQUESTS = V1 + "/access-requests"
    ACCESS_REQUEST_RESPOND = ACCESS_REQUESTS + "/{request_id}/respond"
    STUDENT_ACCESS_REQUESTS = V1 + "/students/{student_id}/access-requests"
    SHARES = V1 + "/shares"
    SHARED_DOCUMENTS = SHARES + "/{verifier_id}/{owner_id}"
    SEND_OTP = V1 + "/send-otp"
    VERIFY_OTP = V1 + "/verify-otp"
