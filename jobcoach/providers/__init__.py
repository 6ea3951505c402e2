# Provider implementations: generative-language models and the job/interview backend
