"""
Blog Post API - Routes Package
================================

Route Inventory:
    - posts.py:   POST   /post              (create)
                  GET    /posts             (list)
                  GET    /post/{post_id}    (get one)
                  PUT    /post/{post_id}    (update)
                  DELETE /post/{post_id}    (delete)
    - health.py:  GET    /health            (MongoDB ping)

Routes stay thin: decode the request, call the PostService injected for
this app, pick the status code.
"""
