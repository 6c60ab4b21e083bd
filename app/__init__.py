# app - Institute Fees API
